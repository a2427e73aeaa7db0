"""
Image gallery operations used by the product editor.

Images are an ordered sequence of references (http(s) URLs or base64 data
URLs); index 0 is the primary image. Every function returns a new tuple and
leaves its input untouched.
"""

from __future__ import annotations

import asyncio
import base64
import mimetypes
import os.path
from typing import Iterable, Sequence, Tuple

from utils.logger import get_logger

_logger = get_logger(__name__)

Images = Tuple[str, ...]


class ImageReadError(ValueError):
    """A selected image file could not be read."""

    def __init__(self, filename: str, reason: str = "") -> None:
        super().__init__(f"Failed to read file: {filename}")
        self.filename = filename
        self.reason = reason


def is_image_url(url: str) -> bool:
    url = url.strip()
    return url.startswith("http://") or url.startswith("https://")


def append_url(images: Sequence[str], url: str) -> Images:
    """
    Append a URL. Blank input is ignored, anything not starting with
    http:// or https:// raises ValueError.
    """
    url = (url or "").strip()
    if not url:
        return tuple(images)
    if not is_image_url(url):
        raise ValueError(
            "Please enter a valid image URL starting with http:// or https://"
        )
    return (*images, url)


def append_uploads(images: Sequence[str], data_urls: Iterable[str]) -> Images:
    """Append file-derived data URLs, dropping anything that is not an image."""
    return (*images, *(d for d in data_urls if d and d.startswith("data:image")))


def _check_index(images: Sequence[str], index: int) -> None:
    if not 0 <= index < len(images):
        raise IndexError(f"image index {index} out of range")


def remove(images: Sequence[str], index: int) -> Images:
    _check_index(images, index)
    return (*images[:index], *images[index + 1 :])


def move(images: Sequence[str], source: int, target: int) -> Images:
    """Move the element at source to target, shifting the ones in between."""
    _check_index(images, source)
    _check_index(images, target)
    items = list(images)
    moved = items.pop(source)
    items.insert(target, moved)
    return tuple(items)


def promote(images: Sequence[str], index: int) -> Images:
    """Make images[index] the primary image."""
    return move(images, index, 0)


def _encode_file(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    with open(path, "rb") as f:
        payload = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime or 'application/octet-stream'};base64,{payload}"


async def read_image_file(path: str) -> str:
    """Read a file off the event loop and return it as a data URL."""
    try:
        return await asyncio.to_thread(_encode_file, path)
    except OSError as e:
        _logger.warning(f"Could not read image {path}: {e}")
        raise ImageReadError(os.path.basename(path), str(e)) from e


async def read_image_files(paths: Iterable[str]) -> Tuple[str, ...]:
    """
    Read several files concurrently. Results keep the order of paths.
    The first failure raises ImageReadError, so a batch is all-or-nothing.
    """
    return tuple(await asyncio.gather(*(read_image_file(p) for p in paths)))
