"""Resolved value types and their invalid sentinels.

These are the abstract semantic values handed to a presentation layer: a color
as four float components, a font as family/face/size, insets as four scalars.
Every kind has exactly one canonical sentinel; comparing with it is the only
failure signal a resolution call gives.
"""
import colorsys
import math
from typing import Any, Literal

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

RenderMode = Literal["automatic", "original", "template"]

ContentMode = Literal[
    "center", "top", "bottom", "left", "right",
    "topLeft", "topRight", "bottomLeft", "bottomRight",
    "resize", "scaleToFill",
    "resizeAspect", "scaleAspectFit",
    "resizeAspectFill", "scaleAspectFill",
    "exactFit",
]

ButtonState = Literal["normal", "highlighted", "disabled", "selected"]


class Color(BaseModel):
    model_config = ConfigDict(frozen=True)

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_white(cls, white: float, alpha: float = 1.0) -> "Color":
        return cls(red=white, green=white, blue=white, alpha=alpha)

    @classmethod
    def from_hsb(cls, hue: float, saturation: float, brightness: float, alpha: float = 1.0) -> "Color":
        r, g, b = colorsys.hsv_to_rgb(hue, saturation, brightness)
        return cls(red=r, green=g, blue=b, alpha=alpha)

    def as_rgba8(self) -> tuple[int, int, int, int]:
        """Components scaled to 0-255 integers, e.g. for Pillow drawing calls."""
        return tuple(round(c * 255) for c in (self.red, self.green, self.blue, self.alpha))  # type: ignore[return-value]


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Size(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class EdgeInsets(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0

    @classmethod
    def from_values(cls, values: list[float]) -> "EdgeInsets | None":
        """Build from a top/left/bottom/right list; None unless exactly four values."""
        if len(values) != 4:
            return None
        top, left, bottom, right = values
        return cls(top=top, left=left, bottom=bottom, right=right)

    @classmethod
    def all(cls, inset: float) -> "EdgeInsets":
        return cls(top=inset, left=inset, bottom=inset, right=inset)


class FontDescriptor(BaseModel):
    """Descriptor attributes keyed by their short names (family, face, name, size, ...)."""

    model_config = ConfigDict(frozen=True)

    attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def family(self) -> str | None:
        return self.attributes.get("family")

    @property
    def face(self) -> str | None:
        return self.attributes.get("face")

    @property
    def name(self) -> str | None:
        return self.attributes.get("name")

    @property
    def size(self) -> float | None:
        size = self.attributes.get("size")
        if isinstance(size, (int, float)) and not isinstance(size, bool):
            return float(size)
        return None

    def adding_attributes(self, attributes: dict[str, Any]) -> "FontDescriptor":
        return FontDescriptor(attributes={**self.attributes, **attributes})

    def with_family(self, family: str) -> "FontDescriptor":
        # A new family invalidates any explicit PostScript name.
        attributes = {k: v for k, v in self.attributes.items() if k != "name"}
        return FontDescriptor(attributes={**attributes, "family": family})

    def with_face(self, face: str) -> "FontDescriptor":
        attributes = {k: v for k, v in self.attributes.items() if k != "name"}
        return FontDescriptor(attributes={**attributes, "face": face})

    def with_size(self, size: float) -> "FontDescriptor":
        return self.adding_attributes({"size": size})


class ResolvedFont(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str            # PostScript name, e.g. "AvenirNext-UltraLight"
    family: str
    face: str
    point_size: float
    descriptor: FontDescriptor

    def __str__(self) -> str:
        return f"{self.name}:{self.point_size}"


class TextAttributes(BaseModel):
    """Attribute map for styled text plus the relative tracking it was built with.

    Tracking (1/1000 em) is kept apart from the map; the absolute equivalent for
    the font's point size is stored in the map under ``kern``.
    """

    model_config = ConfigDict(frozen=True)

    attributes: dict[str, Any] = Field(default_factory=dict)
    tracking: float | None = None

    @property
    def font(self) -> ResolvedFont | None:
        return self.attributes.get("font")

    @property
    def kern(self) -> float | None:
        return self.attributes.get("kern")


class ResolvedImage(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image: Image.Image
    alignment_insets: EdgeInsets | None = None
    cap_insets: EdgeInsets | None = None  # stretchable margins of generated backgrounds
    render_mode: RenderMode | None = None
    content_mode: ContentMode | None = None
    placement: str | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class ButtonStateStyle(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title_attributes: TextAttributes | None = None
    title_image: ResolvedImage | None = None
    background_image: ResolvedImage | None = None


class ButtonStyle(BaseModel):
    """Per-state elements plus shared insets, tint and icon side.

    A valid entry that declares nothing equals INVALID_BUTTON_STYLE; use the
    entry's cache validity, not equality, to tell them apart.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    state_styles: dict[ButtonState, ButtonStateStyle] = Field(default_factory=dict)
    content_insets: EdgeInsets | None = None
    tint_color: Color | None = None
    reverse_icon_side: bool = False


# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------

INVALID_METRIC = math.pi

INVALID_COLOR = Color(red=1.0, green=0.0, blue=0.0, alpha=0.8)

INVALID_FONT_DESCRIPTOR = FontDescriptor(attributes={"name": "Courier-BoldOblique", "size": 21.0})
INVALID_FONT = ResolvedFont(
    name="Courier-BoldOblique",
    family="Courier",
    face="Bold Oblique",
    point_size=21.0,
    descriptor=INVALID_FONT_DESCRIPTOR,
)

INVALID_TEXT_ATTRIBUTES = TextAttributes(attributes={"invalid": "invalid"})

INVALID_BUTTON_STYLE = ButtonStyle()


def _make_invalid_image() -> ResolvedImage:
    """16x16 checkerboard of translucent orange and yellow quarters."""
    img = Image.new("RGBA", (16, 16), (0, 0, 0, 0))
    orange, yellow = (255, 128, 0, 128), (255, 255, 0, 128)
    img.paste(orange, (0, 0, 8, 8))
    img.paste(orange, (8, 8, 16, 16))
    img.paste(yellow, (0, 8, 8, 16))
    img.paste(yellow, (8, 0, 16, 8))
    return ResolvedImage(image=img, cap_insets=EdgeInsets())


INVALID_IMAGE = _make_invalid_image()

# Standard palette for "named/<name>" colors that match no color entry.
STANDARD_COLORS: dict[str, Color] = {
    "black": Color.from_white(0.0),
    "darkGray": Color.from_white(1.0 / 3.0),
    "lightGray": Color.from_white(2.0 / 3.0),
    "white": Color.from_white(1.0),
    "gray": Color.from_white(0.5),
    "red": Color(red=1.0, green=0.0, blue=0.0),
    "green": Color(red=0.0, green=1.0, blue=0.0),
    "blue": Color(red=0.0, green=0.0, blue=1.0),
    "cyan": Color(red=0.0, green=1.0, blue=1.0),
    "yellow": Color(red=1.0, green=1.0, blue=0.0),
    "magenta": Color(red=1.0, green=0.0, blue=1.0),
    "orange": Color(red=1.0, green=0.5, blue=0.0),
    "purple": Color(red=0.5, green=0.0, blue=0.5),
    "brown": Color(red=0.6, green=0.4, blue=0.2),
    "clear": Color.from_white(0.0, alpha=0.0),
}
