from __future__ import annotations

import io
from pathlib import Path
from tempfile import TemporaryDirectory
import unittest

from PIL import Image

from core.io import decode_image, encode_png, save_png
from core.state import Size


class LoaderTests(unittest.TestCase):
    def test_decodes_to_rgba_with_natural_size(self) -> None:
        with TemporaryDirectory() as td:
            path = Path(td) / "photo.png"
            Image.new("RGB", (3, 2), (1, 2, 3)).save(path)
            decoded = decode_image(str(path))

        self.assertIsNotNone(decoded)
        self.assertEqual(decoded.natural_size, Size(3, 2))
        self.assertEqual(decoded.image.mode, "RGBA")
        self.assertEqual(decoded.image.getpixel((0, 0)), (1, 2, 3, 255))

    def test_undecodable_file_is_abandoned(self) -> None:
        with TemporaryDirectory() as td:
            path = Path(td) / "notes.png"
            path.write_text("not an image", encoding="utf-8")
            with self.assertLogs("core.io", level="WARNING"):
                decoded = decode_image(str(path))
        self.assertIsNone(decoded)

    def test_missing_file_is_abandoned(self) -> None:
        with TemporaryDirectory() as td:
            with self.assertLogs("core.io", level="WARNING"):
                decoded = decode_image(str(Path(td) / "missing.jpg"))
        self.assertIsNone(decoded)

    def test_truncated_file_is_abandoned(self) -> None:
        with TemporaryDirectory() as td:
            path = Path(td) / "cut.png"
            buf = io.BytesIO()
            Image.new("RGB", (64, 64), (200, 10, 10)).save(buf, format="PNG")
            path.write_bytes(buf.getvalue()[:60])
            with self.assertLogs("core.io", level="WARNING"):
                decoded = decode_image(str(path))
        self.assertIsNone(decoded)


class ExporterTests(unittest.TestCase):
    def test_encode_png_is_lossless(self) -> None:
        img = Image.new("RGBA", (5, 4), (12, 34, 56, 78))
        data = encode_png(img)
        self.assertTrue(data.startswith(b"\x89PNG"))
        back = Image.open(io.BytesIO(data))
        self.assertEqual(back.size, (5, 4))
        self.assertEqual(back.convert("RGBA").tobytes(), img.tobytes())

    def test_save_png_writes_file(self) -> None:
        img = Image.new("RGBA", (2, 2), (0, 0, 0, 255))
        with TemporaryDirectory() as td:
            path = Path(td) / "edited-image.png"
            save_png(str(path), img)
            with Image.open(path) as saved:
                self.assertEqual(saved.format, "PNG")
                self.assertEqual(saved.size, (2, 2))


if __name__ == "__main__":
    unittest.main()
