from typing import List, Literal, Optional

from utils import config


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def format_currency(value: Optional[float]) -> str:
    """1234.5 -> 'P 1,234.50'. None gives an empty string."""
    if value is None:
        return ""
    return f"{config.CURRENCY_SYMBOL} {float(value):,.2f}"


def parse_amount(text: str) -> Optional[float]:
    """Parse a user-typed amount ('1,200.50'); None for blank or invalid."""
    text = (text or "").replace(",", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def short_image_ref(ref: str, width: int = 60) -> str:
    """Shorten an image reference for list display; data URLs show mime and size."""
    if ref.startswith("data:"):
        mime = ref[5:].split(";", 1)[0]
        return f"[{mime} upload, {len(ref) // 1024} KB]"
    if len(ref) <= width:
        return ref
    return ref[: width - 3] + "..."
