"""Display capabilities model for OLED panels."""

from typing import Any


class DisplayCapabilities:
    """Represents the capabilities of a display device."""

    def __init__(
        self,
        width: int,
        height: int,
        controller: str,
        supports_scroll: bool,
        supports_partial_update: bool = True,
    ) -> None:
        """Initialize display capabilities.

        Args:
            width: Display width in pixels
            height: Display height in pixels
            controller: Controller identifier (e.g. "SSD1306")
            supports_scroll: Whether hardware scrolling is available
            supports_partial_update: Whether ranged updates are supported
        """
        self.width = width
        self.height = height
        self.controller = controller
        self.supports_scroll = supports_scroll
        self.supports_partial_update = supports_partial_update

    @property
    def colors(self) -> int:
        return 2

    def __repr__(self) -> str:
        return (
            f"DisplayCapabilities(width={self.width}, height={self.height}, "
            f"controller={self.controller}, scroll={self.supports_scroll}, "
            f"partial_update={self.supports_partial_update})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DisplayCapabilities):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict[str, Any]:
        """Convert capabilities to dictionary.

        Returns:
            Dictionary representation of capabilities
        """
        return {
            "width": self.width,
            "height": self.height,
            "controller": self.controller,
            "supports_scroll": self.supports_scroll,
            "supports_partial_update": self.supports_partial_update,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DisplayCapabilities":
        """Create DisplayCapabilities from dictionary.

        Args:
            data: Dictionary containing capability data

        Returns:
            DisplayCapabilities instance

        Raises:
            ValueError: If required fields are missing
        """
        required_fields = ["width", "height", "controller", "supports_scroll"]

        for field in required_fields:
            if field not in data:
                raise ValueError(f"Missing required field: {field}")

        return cls(
            width=data["width"],
            height=data["height"],
            controller=data["controller"],
            supports_scroll=data["supports_scroll"],
            supports_partial_update=data.get("supports_partial_update", True),
        )
