"""Fixed-width glyph source.

Fonts are external assets. The core only needs the glyph size, the string of
supported characters and a flat list of column bytes, ``width`` bytes per
glyph in lookup order, least significant bit at the top.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Font:
    """Fixed-width bitmap font."""

    width: int
    height: int
    lookup: Union[str, Sequence[str]]
    font_data: Sequence[int]

    def glyph_columns(self, char: str) -> Sequence[int]:
        """Return the column bytes of ``char``, empty if the font lacks it."""
        try:
            position = list(self.lookup).index(char) * self.width
        except ValueError:
            return ()
        return self.font_data[position : position + self.width]

    def glyph_bits(self, char: str) -> list[list[int]]:
        """Expand a glyph into a column-major bit matrix.

        Args:
            char: Character to look up

        Returns:
            One list of ``height`` bits per glyph column
        """
        return [[(byte >> row) & 1 for row in range(self.height)] for byte in self.glyph_columns(char)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Font":
        """Create a Font from a font-pack style mapping.

        Args:
            data: Mapping with width, height, lookup and fontData keys

        Returns:
            Font instance

        Raises:
            ValueError: If required fields are missing
        """
        required_fields = ["width", "height", "lookup", "fontData"]
        for name in required_fields:
            if name not in data:
                raise ValueError(f"Missing required field: {name}")

        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            lookup=data["lookup"],
            font_data=tuple(data["fontData"]),
        )
