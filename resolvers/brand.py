"""Brand — a loaded brand document plus an explicit fallback chain.

Reads:  <storage>/appearance.json (or any byte source passed to load())
Writes: <storage>/appearance.log when write_log_file is set

Every accessor answers from this brand's document when it has the entry, asks
the fallback brand when it does not (or when nothing is loaded), and finally
returns the kind's invalid sentinel. An entry that exists but fails to resolve
returns its sentinel; the fallback is only for missing entries.
"""
import logging
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import ValidationError

from models.cache import Kind
from models.document import Document
from models.entries import CustomParametersEntry, PlacementEntry
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
from resolvers.parameters import ParameterAccessor
from utils.font_catalog import FontCatalog

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "appearance.json"
LOG_FILE_NAME = "appearance.log"
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

# Loggers whose messages describe problems in the brand document.
_DOCUMENT_LOGGERS = ("models", "resolvers")

ByteSource = Callable[[], bytes]


class Brand:
    def __init__(
        self,
        storage: Path | None = None,
        file_name: str = DEFAULT_FILE_NAME,
        fallback: "Brand | None" = None,
        font_catalog: FontCatalog | None = None,
        write_log_file: bool = False,
    ):
        self.storage = storage
        self.file_name = file_name
        self.fallback = fallback
        self.font_catalog = font_catalog or FontCatalog.default()
        self.write_log_file = write_log_file
        self.document: Document | None = None
        self.sequence = 0
        self._log_handler: logging.Handler | None = None

    @property
    def path(self) -> Path | None:
        return self.storage / self.file_name if self.storage is not None else None

    @property
    def is_loaded(self) -> bool:
        return self.document is not None

    # ---------------------------------------------------------------------------
    # Loading
    # ---------------------------------------------------------------------------

    def load(self, source: ByteSource | None = None) -> bool:
        """(Re)load the document. On failure the previously loaded document is kept.

        Returns True if a new document was installed.
        """
        if source is None:
            path = self.path
            if path is None:
                logger.warning("Brand has no storage and no byte source to load from")
                return False
            self._start_log_file()
            if path.suffix.lower() in (".yaml", ".yml"):
                return self._load_yaml(path)
            source = path.read_bytes
        else:
            self._start_log_file()

        try:
            data = source()
        except OSError as exc:
            logger.warning("Could not read brand document: %s", exc)
            return False
        return self.load_bytes(data)

    def load_bytes(self, data: bytes | str) -> bool:
        try:
            document = Document.from_bytes(data)
        except ValidationError as exc:
            logger.warning("Brand document failed to decode (%d error(s)):\n%s", exc.error_count(), exc)
            return False
        self.install(document)
        return True

    def _load_yaml(self, path: Path) -> bool:
        try:
            document = Document.load(path)
        except (OSError, ValidationError, yaml.YAMLError) as exc:
            logger.warning("Could not load brand document %s: %s", path.name, exc)
            return False
        self.install(document)
        return True

    def install(self, document: Document) -> None:
        """Adopt an already decoded document, supplying this brand's context."""
        if self.storage is not None:
            document.set_storage(self.storage)
        document.set_font_catalog(self.font_catalog)
        self.document = document
        self.sequence += 1
        logger.debug("Installed brand document version %s (sequence %d)", document.version, self.sequence)

    def unload(self) -> None:
        self.document = None
        self._stop_log_file()

    def _start_log_file(self) -> None:
        self._stop_log_file()
        if not self.write_log_file or self.storage is None:
            return
        handler = logging.FileHandler(self.storage / LOG_FILE_NAME, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        for name in _DOCUMENT_LOGGERS:
            logging.getLogger(name).addHandler(handler)
        self._log_handler = handler

    def _stop_log_file(self) -> None:
        if self._log_handler is None:
            return
        for name in _DOCUMENT_LOGGERS:
            logging.getLogger(name).removeHandler(self._log_handler)
        self._log_handler.close()
        self._log_handler = None

    # ---------------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------------

    def has(self, kind: Kind, name: str) -> bool:
        return self.document is not None and name in self.document.entries(kind)

    def _missing(self, kind: Kind, name: str, invalid: Any) -> Any:
        logger.warning('No %s named "%s" in brand or its fallbacks', kind, name)
        return invalid

    def metric(self, name: str) -> float:
        if self.has("metric", name):
            return self.document.resolved_metric(name)
        if self.fallback is not None:
            return self.fallback.metric(name)
        return self._missing("metric", name, INVALID_METRIC)

    def color(self, name: str) -> Color:
        if self.has("color", name):
            return self.document.resolved_color(name)
        if self.fallback is not None:
            return self.fallback.color(name)
        return self._missing("color", name, INVALID_COLOR)

    def font(self, name: str) -> ResolvedFont:
        if self.has("font", name):
            return self.document.resolved_font(name)
        if self.fallback is not None:
            return self.fallback.font(name)
        return self._missing("font", name, INVALID_FONT)

    def text_attributes(self, name: str) -> TextAttributes:
        if self.has("textAttributes", name):
            return self.document.resolved_text_attributes(name)
        if self.fallback is not None:
            return self.fallback.text_attributes(name)
        return self._missing("textAttributes", name, INVALID_TEXT_ATTRIBUTES)

    def image(self, name: str) -> ResolvedImage:
        if self.has("image", name):
            return self.document.resolved_image(name)
        if self.fallback is not None:
            return self.fallback.image(name)
        return self._missing("image", name, INVALID_IMAGE)

    def button_style(self, name: str) -> ButtonStyle:
        if self.has("buttonStyle", name):
            return self.document.resolved_button_style(name)
        if self.fallback is not None:
            return self.fallback.button_style(name)
        return self._missing("buttonStyle", name, INVALID_BUTTON_STYLE)

    def placement(self, name: str) -> PlacementEntry | None:
        if self.has("placement", name):
            return self.document.placement(name)
        if self.fallback is not None:
            return self.fallback.placement(name)
        return self._missing("placement", name, None)

    def parameter(self, name: str) -> CustomParametersEntry | None:
        if self.has("customParameters", name):
            return self.document.parameter(name)
        if self.fallback is not None:
            return self.fallback.parameter(name)
        return self._missing("customParameters", name, None)

    def parameter_accessor(self, name: str, indirect: bool = True) -> ParameterAccessor | None:
        if self.has("customParameters", name):
            return ParameterAccessor.for_entry(self.document, name, indirect=indirect)
        if self.fallback is not None:
            return self.fallback.parameter_accessor(name, indirect=indirect)
        return self._missing("customParameters", name, None)

    # ---------------------------------------------------------------------------
    # Whole-document checks
    # ---------------------------------------------------------------------------

    def resolve_all(self) -> dict[Kind, dict[str, bool]]:
        """Resolve every entry of the loaded document; maps kind -> name -> valid."""
        if self.document is None:
            return {}
        report: dict[Kind, dict[str, bool]] = {}
        for kind in ("metric", "color", "font", "textAttributes", "image", "buttonStyle"):
            results: dict[str, bool] = {}
            for name, entry in sorted(self.document.entries(kind).items()):
                if kind == "metric" and not entry.raw:
                    continue  # comment
                entry.resolved(self.document)
                results[name] = entry.cache.is_valid()
            report[kind] = results
        return report
