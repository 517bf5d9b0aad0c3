"""Parameter accessor — typed reads from free-form custom parameter entries.

Numeric readers go through the metric grammar, so a parameter leaf may be a
plain number, a metric expression, or the name of a metric entry. Every reader
returns None when the key path is absent or the value does not fit.
"""
from __future__ import annotations  # readers named int/float shadow the builtins in annotations

import logging
from typing import TYPE_CHECKING, Any

from models.values import Color, EdgeInsets, Point, Size
from resolvers.metric import extract_metrics_from_json, extract_one_metric_from_json
from utils.json_path import join_key_path, value_at

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import CustomParametersEntry

logger = logging.getLogger(__name__)


class ParameterAccessor:
    def __init__(self, entry: "CustomParametersEntry", document: "Document", prefix: str = ""):
        self.entry = entry
        self.document = document
        self.prefix = prefix

    def __repr__(self) -> str:
        return f"ParameterAccessor(prefix={self.prefix!r})"

    @classmethod
    def for_entry(cls, document: "Document", name: str, indirect: bool = True) -> "ParameterAccessor | None":
        """Accessor over the entry called ``name``, following string redirections to other entries."""
        entry = document.other_parameters.get(name)
        if entry is None:
            logger.warning('Could not find custom parameter entry "%s"', name)
            return None
        if indirect:
            entry = _follow(document, entry, seen={name})
        return cls(entry, document)

    def _path(self, key_path: str) -> str:
        return join_key_path(self.prefix, key_path)

    def _expect(self, key_path: str) -> str:
        return f'accessing parameter "{self._path(key_path)}"'

    # ---------------------------------------------------------------------------
    # Readers
    # ---------------------------------------------------------------------------

    def object(self, key_path: str = "") -> Any:
        return value_at(self.entry.raw, self._path(key_path))

    def string(self, key_path: str = "") -> str | None:
        value = self.object(key_path)
        return value if isinstance(value, str) else None

    def float(self, key_path: str = "") -> float | None:
        value = self.object(key_path)
        if value is None:
            return None
        extracted = extract_one_metric_from_json(value, self.document, self._expect(key_path))
        return extracted[0] if extracted is not None else None

    def int(self, key_path: str = "") -> int | None:
        value = self.float(key_path)
        return int(value) if value is not None else None

    def float_array(self, key_path: str = "", count: int | None = None) -> list[float] | None:
        value = self.object(key_path)
        if value is None:
            return None
        extracted = extract_metrics_from_json(value, self.document, self._expect(key_path), requested=count)
        return extracted[0] if extracted is not None else None

    def point(self, key_path: str = "") -> Point | None:
        values = self.float_array(key_path, count=2)
        return Point(x=values[0], y=values[1]) if values is not None else None

    def size(self, key_path: str = "") -> Size | None:
        values = self.float_array(key_path, count=2)
        return Size(width=values[0], height=values[1]) if values is not None else None

    def insets(self, key_path: str = "") -> EdgeInsets | None:
        values = self.float_array(key_path, count=4)
        return EdgeInsets.from_values(values) if values is not None else None

    def color(self, key_path: str = "") -> Color | None:
        """Only a string leaf naming a valid color entry yields a color."""
        name = self.string(key_path)
        if name is None:
            return None
        found = self.document.fetch_resolved("color", name, self._path(key_path), "customParameters")
        return found.cache.payload if found is not None else None

    def asset_name(self, key_path: str = "") -> str | None:
        """A string leaf used as the name of some other entry."""
        return self.string(key_path)

    # ---------------------------------------------------------------------------
    # Sub-accessors
    # ---------------------------------------------------------------------------

    def accessor(self, key_path: str) -> "ParameterAccessor":
        """Accessor scoped to ``key_path``.

        If the value there is a string naming another parameter entry, the
        accessor reads that entry instead.
        """
        if not key_path:
            return self
        name = self.string(key_path)
        if name is not None and name in self.document.other_parameters:
            entry = _follow(self.document, self.document.other_parameters[name], seen={name})
            return ParameterAccessor(entry, self.document)
        return ParameterAccessor(self.entry, self.document, prefix=self._path(key_path))


def _follow(
    document: "Document", entry: "CustomParametersEntry", seen: set[str]
) -> "CustomParametersEntry":
    while isinstance(entry.raw, str) and entry.raw in document.other_parameters:
        if entry.raw in seen:
            logger.warning('Custom parameter redirection loops back to "%s"', entry.raw)
            break
        seen.add(entry.raw)
        entry = document.other_parameters[entry.raw]
    return entry
