"""Text-attribute-set resolver.

Every problem found in an entry is logged and counted; the entry only fails
once all keys have been looked at, so one pass reports everything wrong with it.
"""
import logging
from typing import TYPE_CHECKING, Any

from models.values import INVALID_TEXT_ATTRIBUTES, TextAttributes
from resolvers.metric import extract_one_metric_from_json

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import TextAttributesEntry

logger = logging.getLogger(__name__)

MIN_TRACKING = -1000.0
MAX_TRACKING = 5000.0

# Known text attributes that cannot be expressed in a brand document yet.
UNSUPPORTED_KEYS = frozenset({
    "paragraphStyle",
    "ligature",
    "kern",
    "strikethroughStyle",
    "underlineStyle",
    "strokeColor",
    "strokeWidth",
    "shadow",
    "textEffect",
    "attachment",
    "link",
    "baselineOffset",
    "underlineColor",
    "strikethroughColor",
    "obliqueness",
    "expansion",
    "writingDirection",
    "verticalGlyphForm",
})

_COLOR_KEYS = ("foregroundColor", "backgroundColor")


def resolve(entry: "TextAttributesEntry", document: "Document") -> TextAttributes:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_TEXT_ATTRIBUTES,
        label=f"text attributes {entry.model_dump(by_alias=True, exclude_none=True)}",
    )


def _compute(entry: "TextAttributesEntry", document: "Document") -> TextAttributes | None:
    errors = 0
    attributes: dict[str, Any] = {}
    tracking: float | None = None

    if entry.based_on:
        entry.cache.depends_on("textAttributes", entry.based_on)
        base = document.fetch_resolved("textAttributes", entry.based_on, "basedOn", "textAttributes")
        if base is None:
            errors += 1
        else:
            resolved: TextAttributes = base.cache.payload
            attributes.update(resolved.attributes)
            tracking = resolved.tracking

    raw = entry.attributes if entry.attributes is not None else {}
    if not isinstance(raw, dict):
        logger.warning("Text attributes must be an object, got %r", raw)
        return None

    for key, value in raw.items():
        if key == "font":
            font = _named(document, entry, "font", value, key)
            if font is None:
                errors += 1
            else:
                attributes["font"] = font
        elif key in _COLOR_KEYS:
            color = _named(document, entry, "color", value, key)
            if color is None:
                errors += 1
            else:
                attributes[key] = color
        elif key == "tracking":
            extracted = extract_one_metric_from_json(value, document, "resolving tracking")
            if extracted is None:
                logger.warning('Text attributes could not resolve tracking "%s"', value)
                errors += 1
            else:
                tracking = extracted[0]
                entry.cache.depends_on_all(extracted[1])
        elif key in UNSUPPORTED_KEYS:
            logger.warning('Text attribute "%s" is not supported yet', key)
            errors += 1
        else:
            logger.warning('Unrecognised text attribute key "%s"', key)
            errors += 1

    font = attributes.get("font")
    if tracking is not None and font is not None:
        if not MIN_TRACKING <= tracking <= MAX_TRACKING:
            logger.warning("Tracking %s is outside [%s, %s]", tracking, MIN_TRACKING, MAX_TRACKING)
            errors += 1
        else:
            attributes["kern"] = kern_for_tracking(tracking, font.point_size)

    if errors:
        logger.warning("Found %d error(s) resolving text attributes", errors)
        return None
    return TextAttributes(attributes=attributes, tracking=tracking)


def kern_for_tracking(tracking: float, point_size: float) -> float:
    """Tracking is in thousandths of an em; kern is in points."""
    return point_size / 1000.0 * tracking


def _named(document: "Document", entry: "TextAttributesEntry", kind, name: Any, key: str) -> Any | None:
    if not isinstance(name, str):
        logger.warning('Text attribute "%s" must name a %s entry, got %r', key, kind, name)
        return None
    entry.cache.depends_on(kind, name)
    found = document.fetch_resolved(kind, name, key, "textAttributes")
    if found is None:
        return None
    return found.cache.payload
