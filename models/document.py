"""Brand document — typed representation of appearance.json.

Holds one name → entry mapping per asset kind. Groups are named sub-documents
whose entries are merged into the root mappings at decode time under a
``<group>.`` prefix and then discarded, so the root is the single source of
truth. Resolution never changes the mappings, only the per-entry caches.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.cache import Kind
from models.entries import (
    ButtonStyleEntry,
    ColorEntry,
    CustomParametersEntry,
    FontEntry,
    ImageEntry,
    MetricEntry,
    PlacementEntry,
    TextAttributesEntry,
)
from models.values import (
    INVALID_BUTTON_STYLE,
    INVALID_COLOR,
    INVALID_FONT,
    INVALID_IMAGE,
    INVALID_METRIC,
    INVALID_TEXT_ATTRIBUTES,
    ButtonStyle,
    Color,
    ResolvedFont,
    ResolvedImage,
    TextAttributes,
)
from utils.font_catalog import FontCatalog

logger = logging.getLogger(__name__)

# Field name of each kind's mapping, in document order.
_FIELD_BY_KIND: dict[Kind, str] = {
    "metric": "metrics",
    "color": "colors",
    "font": "fonts",
    "textAttributes": "text_attributes",
    "placement": "placements",
    "image": "images",
    "buttonStyle": "button_styles",
    "customParameters": "other_parameters",
}


class Context:
    """External state supplied to a decoded document, not part of the declarative graph."""

    def __init__(self, storage: Path | None = None, font_catalog: FontCatalog | None = None):
        self.storage = storage
        self.font_catalog = font_catalog or FontCatalog.default()


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: int | None = 0  # mandatory for the root document, ignored for groups

    metrics: dict[str, MetricEntry] = Field(default_factory=dict)
    colors: dict[str, ColorEntry] = Field(default_factory=dict)
    fonts: dict[str, FontEntry] = Field(default_factory=dict)
    text_attributes: dict[str, TextAttributesEntry] = Field(default_factory=dict)
    placements: dict[str, PlacementEntry] = Field(default_factory=dict)
    images: dict[str, ImageEntry] = Field(default_factory=dict)
    button_styles: dict[str, ButtonStyleEntry] = Field(default_factory=dict)
    other_parameters: dict[str, CustomParametersEntry] = Field(default_factory=dict)

    groups: dict[str, "Document"] | None = None

    _context: Context = PrivateAttr(default_factory=Context)
    _lock: threading.RLock = PrivateAttr(default_factory=threading.RLock)

    # ---------------------------------------------------------------------------
    # Decode-time validation
    # ---------------------------------------------------------------------------

    @field_validator(
        "colors", "fonts", "text_attributes", "placements", "images", "button_styles",
    )
    @classmethod
    def names_have_no_spaces(cls, v: dict[str, Any]) -> dict[str, Any]:
        for name in v:
            if " " in name:
                raise ValueError(f'The coding key "{name}" containing this entry may not contain spaces.')
        return v

    @field_validator("metrics")
    @classmethod
    def metric_names_have_no_spaces(cls, v: dict[str, MetricEntry]) -> dict[str, MetricEntry]:
        # An empty metric is tolerated as a comment, whatever its key.
        for name, entry in v.items():
            if " " in name and entry.raw:
                raise ValueError(f'The coding key "{name}" containing this metric entry may not contain spaces.')
        return v

    @field_validator("other_parameters")
    @classmethod
    def parameter_names_have_no_spaces(
        cls, v: dict[str, CustomParametersEntry]
    ) -> dict[str, CustomParametersEntry]:
        for name, entry in v.items():
            if " " in name and entry.raw is not None:
                raise ValueError(
                    f'The coding key "{name}" containing this custom parameter entry may not contain spaces.'
                )
        return v

    @model_validator(mode="after")
    def merge_groups(self) -> "Document":
        """Flatten every group into the root mappings as ``<group>.<name>``."""
        if not self.groups:
            return self
        for group_name, group in self.groups.items():
            prefix = f"{group_name}."
            for kind, field in _FIELD_BY_KIND.items():
                into: dict[str, Any] = getattr(self, field)
                for name, entry in getattr(group, field).items():
                    merged_name = prefix + name
                    if merged_name in into:
                        raise ValueError(
                            f'Found duplicate {kind} keys "{merged_name}" while merging group "{group_name}"'
                        )
                    into[merged_name] = entry
        self.groups = None
        return self

    # ---------------------------------------------------------------------------
    # Loading and dumping
    # ---------------------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes | str) -> "Document":
        """Decode a JSON document. Raises pydantic.ValidationError on any structural error."""
        return cls.model_validate_json(data)

    @classmethod
    def load(cls, path: Path) -> "Document":
        """Load from a JSON or YAML file and set its storage root to the file's folder.

        Raises FileNotFoundError if path does not exist.
        """
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            document = cls.model_validate(yaml.safe_load(text) or {})
        else:
            document = cls.model_validate_json(text)
        document.set_storage(path.parent)
        return document

    def dump_json(self, indent: int | None = 2) -> str:
        """Encode the raw entries. Caches and context are not part of the persisted form."""
        return self.model_dump_json(indent=indent, by_alias=True, exclude={"groups"})

    def dump_dict(self) -> dict[str, Any]:
        return json.loads(self.dump_json(indent=None))

    # ---------------------------------------------------------------------------
    # Context
    # ---------------------------------------------------------------------------

    @property
    def context(self) -> Context:
        return self._context

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def set_storage(self, storage: Path) -> None:
        self._context.storage = storage

    def set_font_catalog(self, catalog: FontCatalog) -> None:
        self._context.font_catalog = catalog

    # ---------------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------------

    def entries(self, kind: Kind) -> dict[str, Any]:
        return getattr(self, _FIELD_BY_KIND[kind])

    def fetch_resolved(self, kind: Kind, name: str, for_key: str, of_kind: Kind) -> Any | None:
        """Return the named entry after resolving it, or None if missing or invalid."""
        entry = self.entries(kind).get(name)
        if entry is None:
            logger.warning('%s couldn\'t find %s entry named "%s"', of_kind, for_key, name)
            return None
        entry.resolved(self)
        if not entry.cache.is_valid():
            logger.warning('%s wants to use %s entry named "%s", which is not valid', of_kind, for_key, name)
            return None
        return entry

    def _resolve_named(self, kind: Kind, name: str, invalid: Any) -> Any:
        entry = self.entries(kind).get(name)
        if entry is None:
            logger.warning('No %s entry named "%s"', kind, name)
            return invalid
        return entry.resolved(self)

    def resolved_metric(self, name: str) -> float:
        return self._resolve_named("metric", name, INVALID_METRIC)

    def resolved_color(self, name: str) -> Color:
        return self._resolve_named("color", name, INVALID_COLOR)

    def resolved_font(self, name: str) -> ResolvedFont:
        return self._resolve_named("font", name, INVALID_FONT)

    def resolved_text_attributes(self, name: str) -> TextAttributes:
        return self._resolve_named("textAttributes", name, INVALID_TEXT_ATTRIBUTES)

    def resolved_image(self, name: str) -> ResolvedImage:
        return self._resolve_named("image", name, INVALID_IMAGE)

    def resolved_button_style(self, name: str) -> ButtonStyle:
        return self._resolve_named("buttonStyle", name, INVALID_BUTTON_STYLE)

    def placement(self, name: str) -> PlacementEntry | None:
        entry = self.placements.get(name)
        if entry is None:
            logger.warning('No placement entry named "%s"', name)
        return entry

    def parameter(self, name: str) -> CustomParametersEntry | None:
        entry = self.other_parameters.get(name)
        if entry is None:
            logger.warning('No custom parameter entry named "%s"', name)
        return entry

    def parameter_accessor(self, name: str, indirect: bool = True):
        """Typed reader over a custom parameter entry; see resolvers.parameters."""
        from resolvers.parameters import ParameterAccessor
        return ParameterAccessor.for_entry(self, name, indirect=indirect)
