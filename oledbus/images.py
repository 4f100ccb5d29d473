"""RGBA image sources for OLED compositing."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class RGBAImage:
    """Read-only image: ``width * height`` pixels, 4 bytes each, row-major."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * BYTES_PER_PIXEL
        if self.width < 0 or self.height < 0 or len(self.data) != expected:
            raise ValueError(
                f"Invalid RGBA data: {len(self.data)} bytes for "
                f"{self.width}x{self.height}, expected {expected}"
            )

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) tuple at (x, y)."""
        offset = (self.width * y + x) * BYTES_PER_PIXEL
        r, g, b, a = self.data[offset : offset + BYTES_PER_PIXEL]
        return r, g, b, a

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RGBAImage":
        """Convert a PIL Image to an RGBAImage.

        Args:
            image: PIL Image in any mode

        Returns:
            RGBAImage with the same dimensions
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width=width, height=height, data=image.tobytes())


def load_rgba_image(path: Union[str, Path]) -> RGBAImage:
    """Decode an image file with Pillow.

    Args:
        path: Path to a PNG or any format Pillow reads

    Returns:
        RGBAImage

    Raises:
        FileNotFoundError: If the file does not exist
    """
    image_path = Path(path)
    if not image_path.is_file():
        logger.warning(f"Image file {image_path} does not exist")
        raise FileNotFoundError(f"Image file not found: {image_path}")

    with Image.open(image_path) as image:
        rgba = RGBAImage.from_pil(image)
    logger.debug(f"Loaded image {image_path.name} ({rgba.width}x{rgba.height})")
    return rgba


def as_rgba_image(source: Union[RGBAImage, Image.Image, str, Path]) -> RGBAImage:
    """Normalize any supported image source into an RGBAImage."""
    if isinstance(source, RGBAImage):
        return source
    if isinstance(source, Image.Image):
        return RGBAImage.from_pil(source)
    return load_rgba_image(source)
