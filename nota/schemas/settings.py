"""Display preference schemas."""

from enum import IntEnum

from pydantic import BaseModel


class TextSizeLevel(IntEnum):
    """Display text size, smallest to largest."""

    SMALLEST = 0
    SMALLER = 1
    NORMAL = 2
    LARGER = 3
    LARGEST = 4

    @classmethod
    def clamp(cls, level: int) -> "TextSizeLevel":
        return cls(min(max(level, cls.SMALLEST), cls.LARGEST))

    def accessible_sizes(self) -> "AccessibleSizes":
        title, body, button = _SIZES[self]
        return AccessibleSizes(title=title, body=body, button=button)


class AccessibleSizes(BaseModel):
    """Point sizes for the editor at a given level."""

    title: int
    body: int
    button: int


_SIZES = {
    TextSizeLevel.SMALLEST: (16, 14, 14),
    TextSizeLevel.SMALLER: (18, 16, 16),
    TextSizeLevel.NORMAL: (20, 18, 18),
    TextSizeLevel.LARGER: (22, 20, 20),
    TextSizeLevel.LARGEST: (24, 22, 22),
}


class TextSizeUpdate(BaseModel):
    """Schema for updating the text size. Out-of-range values are clamped."""

    level: int


class TextSizeResponse(BaseModel):
    """Schema for the text size preference."""

    level: int
    name: str
    sizes: AccessibleSizes

    @classmethod
    def from_level(cls, level: int) -> "TextSizeResponse":
        size = TextSizeLevel.clamp(level)
        return cls(level=int(size), name=size.name.lower(), sizes=size.accessible_sizes())
