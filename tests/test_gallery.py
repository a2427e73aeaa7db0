import base64
import os
import tempfile
import unittest

from utils import gallery

IMAGES = ("a", "b", "c", "d", "e")

# smallest valid PNG header is enough; only the bytes are encoded
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class GalleryOpsTestCase(unittest.TestCase):
    def test_promote_moves_to_front_and_keeps_order(self):
        for i in range(len(IMAGES)):
            result = gallery.promote(IMAGES, i)
            self.assertEqual(result[0], IMAGES[i])
            rest = [img for j, img in enumerate(IMAGES) if j != i]
            self.assertEqual(list(result[1:]), rest)

    def test_move_shifts_intermediates(self):
        self.assertEqual(gallery.move(IMAGES, 1, 3), ("a", "c", "d", "b", "e"))
        self.assertEqual(gallery.move(IMAGES, 4, 0), ("e", "a", "b", "c", "d"))
        self.assertEqual(gallery.move(IMAGES, 2, 2), IMAGES)
        with self.assertRaises(IndexError):
            gallery.move(IMAGES, 0, 5)

    def test_remove(self):
        self.assertEqual(gallery.remove(IMAGES, 0), ("b", "c", "d", "e"))
        self.assertEqual(gallery.remove(("only",), 0), ())
        with self.assertRaises(IndexError):
            gallery.remove(IMAGES, -1)

    def test_inputs_are_not_mutated(self):
        images = ["a", "b"]
        gallery.promote(images, 1)
        gallery.remove(images, 0)
        self.assertEqual(images, ["a", "b"])

    def test_append_url(self):
        self.assertEqual(
            gallery.append_url(("a",), "  https://cdn.example.com/x.jpg "),
            ("a", "https://cdn.example.com/x.jpg"),
        )
        self.assertEqual(gallery.append_url(("a",), "http://x"), ("a", "http://x"))
        self.assertEqual(gallery.append_url(("a",), "   "), ("a",))
        for bad in ("ftp://x/y.png", "www.example.com/a.jpg", "image.png"):
            with self.assertRaises(ValueError):
                gallery.append_url(("a",), bad)

    def test_append_uploads_drops_non_images(self):
        result = gallery.append_uploads(
            ("a",), ["data:image/png;base64,AAA", "data:text/plain;base64,BBB", ""]
        )
        self.assertEqual(result, ("a", "data:image/png;base64,AAA"))


class ImageFileTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.temp_dir.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    async def test_read_image_files_keeps_order(self):
        first = self._write("first.png", PNG_BYTES)
        second = self._write("second.jpg", b"jpegdata")

        result = await gallery.read_image_files([first, second])
        self.assertEqual(len(result), 2)
        self.assertTrue(result[0].startswith("data:image/png;base64,"))
        self.assertTrue(result[1].startswith("data:image/jpeg;base64,"))
        payload = result[0].split(",", 1)[1]
        self.assertEqual(base64.b64decode(payload), PNG_BYTES)

    async def test_missing_file_names_the_file(self):
        good = self._write("good.png", PNG_BYTES)
        missing = os.path.join(self.temp_dir.name, "missing.png")

        with self.assertRaises(gallery.ImageReadError) as ctx:
            await gallery.read_image_files([good, missing])
        self.assertEqual(ctx.exception.filename, "missing.png")
        self.assertIn("missing.png", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    async def test_non_image_file_is_dropped_on_append(self):
        text = self._write("notes.txt", b"hello")
        data_urls = await gallery.read_image_files([text])
        self.assertEqual(gallery.append_uploads((), data_urls), ())
