"""Color grammar — tagged, slash-delimited color encodings.

    rgb/173/82/76        rgba/.7/.3/.5/1
    hsb/0/.9/.7          hsba/0/.9/.7/1
    w/.5                 wa/.5/1
    web/FFCCAA           web/FFCCAA80
    named/brand_red      named/orange   (entry first, then the standard palette)

Components other than ``web`` and ``named`` are metric expressions. Spaces are
stripped before the tag is matched. A component set is either 0-1 fractions
or 0-255 values; mixing the two is ambiguous and rejected.
"""
import logging
import re
from typing import TYPE_CHECKING

from models.values import INVALID_COLOR, STANDARD_COLORS, Color
from resolvers.metric import extract_metric_for_each

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import ColorEntry

logger = logging.getLogger(__name__)

# Format tag -> exact number of components
_COMPONENT_COUNTS = {
    "rgb": 3,
    "rgba": 4,
    "hsb": 3,
    "hsba": 4,
    "w": 1,
    "wa": 2,
    "web": 1,
    "named": 1,
}

_HEX_PAIR = re.compile(r"[0-9a-fA-F]{2}")


def resolve(entry: "ColorEntry", document: "Document") -> Color:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_COLOR,
        label=f'color "{entry.raw}"',
    )


def _compute(entry: "ColorEntry", document: "Document") -> Color | None:
    raw = entry.raw.replace(" ", "")
    tag, *parts = raw.split("/")

    if tag not in _COMPONENT_COUNTS:
        logger.warning('Unrecognised format in colour "%s"', entry.raw)
        return None
    if len(parts) != _COMPONENT_COUNTS[tag]:
        logger.warning('Inconsistent number of parts in colour "%s"', entry.raw)
        return None

    if tag == "named":
        return _named(parts[0], entry, document)
    if tag == "web":
        components = _web_components(parts[0], entry.raw)
        if components is None:
            return None
        return _make_color(tag, [c / 255.0 for c in components], entry.raw)

    extracted = extract_metric_for_each(parts, document, f"resolving color with format {tag}")
    if extracted is None or len(extracted[0]) != len(parts):
        return None
    values, dependencies = extracted
    entry.cache.depends_on_all(dependencies)

    components = _normalise_components(tag, values, parts, entry.raw)
    if components is None:
        return None
    return _make_color(tag, components, entry.raw)


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

def _named(name: str, entry: "ColorEntry", document: "Document") -> Color | None:
    other = document.colors.get(name)
    if other is not None:
        entry.cache.depends_on("color", name)
        value = other.resolved(document)
        if not other.cache.is_valid():
            logger.warning('Colour "%s" refers to colour "%s", which is not valid', entry.raw, name)
            return None
        return value
    if name in STANDARD_COLORS:
        return STANDARD_COLORS[name]
    logger.warning('Colour "%s" could not find referenced colour "%s"', entry.raw, name)
    return None


def _web_components(hex_digits: str, raw: str) -> list[float] | None:
    """Hex pairs as 0-255 values; three or four of them, alpha defaulting to 255."""
    components: list[float] = []
    position = 0
    while position + 2 <= len(hex_digits) and len(components) < 4:
        pair = hex_digits[position:position + 2]
        if not _HEX_PAIR.fullmatch(pair):
            logger.warning('Invalid component "%s" in colour "%s"', pair, raw)
            return None
        components.append(float(int(pair, 16)))
        position += 2
    if position != len(hex_digits):
        logger.warning('Too many components in colour "%s"', raw)
        return None
    if len(components) not in (3, 4):
        logger.warning('Expect three or four components in colour "%s"', raw)
        return None
    if len(components) == 3:
        components.append(255.0)
    return components


def _normalise_components(
    tag: str, values: list[float], parts: list[str], raw: str
) -> list[float] | None:
    """Validate ranges, fill empty components and scale 0-255 values down to 0-1."""
    alpha_index = 1 if tag in ("w", "wa") else 3
    components: list[float] = []
    have_fractional = False
    have_255_range = False

    for value, part in zip(values, parts):
        if not part:
            is_alpha = len(components) == alpha_index
            components.append((255.0 if have_255_range else 1.0) if is_alpha else 0.0)
            continue
        if not 0.0 <= value <= 255.0:
            logger.warning('Invalid component "%s" in colour "%s"', part, raw)
            return None
        have_255_range = have_255_range or value > 1.0
        have_fractional = have_fractional or 0.0 < value < 1.0
        components.append(value)

    if have_fractional and have_255_range:
        logger.warning('Inconsistent component types in colour "%s"', raw)
        return None
    if len(components) in (1, 3):
        components.append(255.0 if have_255_range else 1.0)
    if have_255_range:
        components = [c / 255.0 for c in components]
    return components


def _make_color(tag: str, components: list[float], raw: str) -> Color | None:
    if len(components) == 2:
        return Color.from_white(components[0], alpha=components[1])
    if len(components) == 4:
        if tag in ("hsb", "hsba"):
            return Color.from_hsb(*components)
        red, green, blue, alpha = components
        return Color(red=red, green=green, blue=blue, alpha=alpha)
    logger.warning('Error parsing colour "%s"', raw)
    return None
