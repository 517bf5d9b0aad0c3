"""Font resolver.

Assembles a FontDescriptor from an optional ``basedOn`` parent, the free-form
``attributes`` object, the ``family``/``face`` overrides and a ``size`` metric,
then realizes it against the document's font catalog. A descriptor the catalog
has to substitute (wrong family, missing face) is an invalid font.
"""
import logging
from typing import TYPE_CHECKING, Any

from models.values import INVALID_FONT, FontDescriptor, ResolvedFont
from resolvers.metric import extract_one_metric, extract_one_metric_from_json

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import FontEntry

logger = logging.getLogger(__name__)

DEFAULT_POINT_SIZE = 17.0

# Descriptor attribute keys accepted in "attributes"; "!"-prefixed keys pass through.
DESCRIPTOR_KEYS = frozenset({
    "family",
    "face",
    "name",
    "size",
    "visibleName",
    "matrix",
    "characterSet",
    "traits",
    "fixedAdvance",
    "featureSettings",
    "textStyle",
    "symbolic",
})

_STRING_KEYS = ("family", "face", "name", "visibleName", "textStyle")


def resolve(entry: "FontEntry", document: "Document") -> ResolvedFont:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_FONT,
        label=f"font {entry.model_dump(by_alias=True, exclude_none=True)}",
    )


def _compute(entry: "FontEntry", document: "Document") -> ResolvedFont | None:
    descriptor = FontDescriptor()

    if entry.based_on:
        entry.cache.depends_on("font", entry.based_on)
        base = document.fetch_resolved("font", entry.based_on, "basedOn", "font")
        if base is None:
            return None
        descriptor = base.cache.payload.descriptor

    if entry.attributes is not None:
        attributes = _descriptor_attributes(entry.attributes, entry, document)
        if attributes is None:
            return None
        descriptor = descriptor.adding_attributes(attributes)

    if entry.family:
        descriptor = descriptor.with_family(entry.family)
    if entry.face:
        descriptor = descriptor.with_face(entry.face)

    if entry.size:
        extracted = extract_one_metric(entry.size, document, f'resolving size of font "{entry.size}"')
        if extracted is None:
            logger.warning('Font could not resolve size "%s"', entry.size)
            return None
        size, dependencies = extracted
        entry.cache.depends_on_all(dependencies)
        descriptor = descriptor.with_size(size)

    return realize(descriptor, document)


def realize(descriptor: FontDescriptor, document: "Document") -> ResolvedFont | None:
    """Instantiate ``descriptor`` and reject it if the catalog substituted another font."""
    catalog = document.context.font_catalog
    expected = catalog.expected_name(descriptor)
    if expected is None:
        logger.warning("Font descriptor %s names no family or font", descriptor.attributes)
        return None
    realized = catalog.realize(descriptor)
    if realized.name != expected:
        logger.warning('Font "%s" was requested but "%s" was realized', expected, realized.name)
        return None
    point_size = descriptor.size if descriptor.size is not None else DEFAULT_POINT_SIZE
    return ResolvedFont(
        name=realized.name,
        family=realized.family,
        face=realized.face,
        point_size=point_size,
        descriptor=descriptor.with_size(point_size),
    )


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

def _descriptor_attributes(
    raw: Any, entry: "FontEntry", document: "Document"
) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        logger.warning("Font attributes must be an object, got %r", raw)
        return None

    attributes: dict[str, Any] = {}
    for key, value in raw.items():
        if key.startswith("!"):
            attributes[key[1:]] = value
        elif key not in DESCRIPTOR_KEYS:
            logger.warning('Unrecognised font attribute key "%s"', key)
            return None
        elif key == "size":
            extracted = extract_one_metric_from_json(value, document, "resolving font attribute size")
            if extracted is None:
                logger.warning('Font attribute size "%s" is not a metric', value)
                return None
            attributes["size"] = extracted[0]
            entry.cache.depends_on_all(extracted[1])
        elif key in _STRING_KEYS and not isinstance(value, str):
            logger.warning('Font attribute "%s" must be a string, got %r', key, value)
            return None
        else:
            attributes[key] = value
    return attributes
