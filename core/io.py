from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from core.constants import EXPORT_FORMAT
from core.state import Size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    natural_size: Size
    image: Image.Image


def load_image_rgba(path: str) -> Image.Image:
    with Image.open(path) as img:
        # Force full decode so truncated files fail here, not at render time
        img.load()
        return img.convert("RGBA")


def decode_image(path: str) -> Optional[DecodedImage]:
    """Decode ``path``; returns None (and logs) when the file is unusable."""
    try:
        img = load_image_rgba(path)
    except (OSError, SyntaxError, EOFError, ValueError, UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.warning(f"Abandoned load of {path}: {e}")
        return None
    if img.width < 1 or img.height < 1:
        logger.warning(f"Abandoned load of {path}: empty image")
        return None
    logger.info(f"Decoded {path} ({img.width}x{img.height})")
    return DecodedImage(natural_size=Size(img.width, img.height), image=img)


def encode_png(img_rgba: Image.Image) -> bytes:
    buf = io.BytesIO()
    img_rgba.save(buf, format=EXPORT_FORMAT)
    return buf.getvalue()


def save_png(path: str, img_rgba: Image.Image) -> None:
    # PNG keeps alpha and is lossless
    img_rgba.save(path, format=EXPORT_FORMAT)
    logger.info(f"Exported {img_rgba.width}x{img_rgba.height} to {path}")
