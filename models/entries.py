"""Entry models — one immutable record per declared brand asset.

Entries hold the raw declared fields exactly as decoded (strings naming other
entries, or metric/color grammar text) plus one privately owned
ResolutionCache. ``resolved(document)`` hands the entry to its resolver, which
consults and fills that cache.
"""
from typing import TYPE_CHECKING, ClassVar, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    JsonValue,
    PrivateAttr,
    RootModel,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from models.cache import Kind, ResolutionCache
from models.values import (
    ButtonStyle,
    Color,
    ContentMode,
    RenderMode,
    ResolvedFont,
    ResolvedImage,
    TextAttributes,
)

if TYPE_CHECKING:
    from models.document import Document

_ENTRY_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

_RENDER_MODES: dict[str, RenderMode] = {
    "automatic": "automatic",
    "original": "original",
    "alwaysOriginal": "original",
    "template": "template",
    "alwaysTemplate": "template",
}

_LAYOUT_RELATIONS = {
    "<=": "lessThanOrEqual", "LE": "lessThanOrEqual", "le": "lessThanOrEqual",
    "lessThanOrEqual": "lessThanOrEqual",
    "==": "equal", "EQ": "equal", "eq": "equal", "equal": "equal",
    ">=": "greaterThanOrEqual", "GE": "greaterThanOrEqual", "ge": "greaterThanOrEqual",
    "greaterThanOrEqual": "greaterThanOrEqual",
}


# ---------------------------------------------------------------------------
# Grammar-string entries
# ---------------------------------------------------------------------------

class MetricEntry(RootModel[str]):
    """A metric grammar string, e.g. ``"14"``, ``"add/size_body/2"``."""

    model_config = ConfigDict(frozen=True)

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "metric"

    @property
    def raw(self) -> str:
        return self.root

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> float:
        from resolvers import metric  # resolvers import the models
        return metric.resolve(self, document)


class ColorEntry(RootModel[str]):
    """A color grammar string, e.g. ``"rgb/173/82/76"``, ``"named/brand_red"``."""

    model_config = ConfigDict(frozen=True)

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "color"

    @property
    def raw(self) -> str:
        return self.root

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> Color:
        from resolvers import color
        return color.resolve(self, document)


class CustomParametersEntry(RootModel[JsonValue]):
    """Free-form JSON value read through a ParameterAccessor."""

    model_config = ConfigDict(frozen=True)

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "customParameters"

    @property
    def raw(self) -> JsonValue:
        return self.root

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> JsonValue:
        return self.root


# ---------------------------------------------------------------------------
# Record entries
# ---------------------------------------------------------------------------

class FontEntry(BaseModel):
    model_config = _ENTRY_CONFIG

    based_on: str | None = None   # name of another font entry
    family: str | None = None
    face: str | None = None
    size: str | None = None       # name of a metric entry
    attributes: JsonValue = None  # descriptor attributes, validated during resolve

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "font"

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> ResolvedFont:
        from resolvers import font
        return font.resolve(self, document)


class TextAttributesEntry(BaseModel):
    model_config = _ENTRY_CONFIG

    based_on: str | None = None
    attributes: JsonValue = None

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "textAttributes"

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> TextAttributes:
        from resolvers import text_attributes
        return text_attributes.resolve(self, document)


class RelativeDimension(BaseModel):
    model_config = _ENTRY_CONFIG

    dimension: Literal["width", "height"]
    relation: Literal["lessThanOrEqual", "equal", "greaterThanOrEqual"] = "equal"
    relative_to: str
    multiplier: float = 1.0
    constant: float = 0.0

    @field_validator("relation", mode="before")
    @classmethod
    def normalise_relation(cls, v: object) -> object:
        if isinstance(v, str):
            if v not in _LAYOUT_RELATIONS:
                raise ValueError(f'No layout relation recognised from value "{v}"')
            return _LAYOUT_RELATIONS[v]
        return v


class PlacementEntry(BaseModel):
    """Layout rules for a view showing an image. Applied by the presentation layer."""

    model_config = _ENTRY_CONFIG

    placement_rules: str | None = None
    auxiliary_views: str | None = None
    metric_names: str | None = None
    relative_dimensions: list[RelativeDimension] | None = None
    content_mode: ContentMode | None = None

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "placement"

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> "PlacementEntry":
        return self


class SimpleBackground(BaseModel):
    """Procedural stretchable rounded-rectangle background."""

    model_config = _ENTRY_CONFIG

    fill_color: str | None = None     # color entry name
    stroke_color: str | None = None   # color entry name
    line_width: str | None = None     # metric expressions from here on
    corner_radius: str | None = None
    minimum_width: str | None = None
    minimum_height: str | None = None


class ImageEntry(BaseModel):
    model_config = _ENTRY_CONFIG

    # Exactly one source: basedOn, filePath or makeBackground.
    based_on: str | None = None
    file_path: str | None = None      # relative to the document's storage root
    make_background: SimpleBackground | None = None

    alignment_insets: str | None = None   # "top/left/bottom/right" metric expressions
    content_mode: ContentMode | None = None
    render_mode: RenderMode | None = None
    placement: str | None = None          # name of a placement entry

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "image"

    @field_validator("render_mode", mode="before")
    @classmethod
    def normalise_render_mode(cls, v: object) -> object:
        if isinstance(v, str):
            if v not in _RENDER_MODES:
                raise ValueError(f'Cannot reconstruct render mode from "{v}"')
            return _RENDER_MODES[v]
        return v

    @model_validator(mode="after")
    def exactly_one_source(self) -> "ImageEntry":
        sources = [self.based_on, self.file_path, self.make_background]
        if sum(s is not None for s in sources) != 1:
            raise ValueError(
                "Must have one and only one of 'basedOn', 'filePath' and 'makeBackground' keys present."
            )
        return self

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> ResolvedImage:
        from resolvers import image
        return image.resolve(self, document)


class StyleElementNames(BaseModel):
    model_config = _ENTRY_CONFIG

    title_attributes: str | None = None   # text attributes entry name
    title_image: str | None = None        # image entry name
    background_image: str | None = None   # image entry name


class ButtonStyleEntry(BaseModel):
    model_config = _ENTRY_CONFIG

    normal_style: StyleElementNames | None = None
    highlighted_style: StyleElementNames | None = None
    disabled_style: StyleElementNames | None = None
    selected_style: StyleElementNames | None = None
    content_insets: str | None = None     # "top/left/bottom/right" metric expressions
    tint_color: str | None = None         # color entry name
    reverse_icon_side: bool | None = None

    _cache: ResolutionCache = PrivateAttr(default_factory=ResolutionCache)
    kind: ClassVar[Kind] = "buttonStyle"

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolved(self, document: "Document") -> ButtonStyle:
        from resolvers import button_style
        return button_style.resolve(self, document)
