"""Image resolver.

Reads:  image files below the document's storage root (``filePath`` entries)
Writes: nothing; generated backgrounds are rendered in memory with Pillow

An entry takes its pixels from exactly one source (another image entry, a
file, or a procedurally drawn rounded-rectangle background) and then layers
alignment insets, render mode, content mode and a placement reference on top.
"""
import io
import logging
import math
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from models.values import INVALID_IMAGE, Color, EdgeInsets, ResolvedImage
from resolvers.metric import extract_insets, extract_one_metric

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import ImageEntry, SimpleBackground

logger = logging.getLogger(__name__)

# Stretchable strip left between the fixed caps of a generated background.
FLEXIBLE_CENTRE = 4.0


class StorageNotConfiguredError(RuntimeError):
    """A file-backed image was resolved before the document was given a storage root."""


def resolve(entry: "ImageEntry", document: "Document") -> ResolvedImage:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_IMAGE,
        label=f"image {entry.model_dump(by_alias=True, exclude_none=True)}",
    )


def _compute(entry: "ImageEntry", document: "Document") -> ResolvedImage | None:
    if entry.based_on is not None:
        resolved = _from_base(entry, document)
    elif entry.file_path is not None:
        resolved = _from_file(entry.file_path, document)
    else:
        resolved = _from_background(entry.make_background, entry, document)
    if resolved is None:
        return None

    updates: dict = {}
    if entry.alignment_insets is not None:
        extracted = extract_insets(entry.alignment_insets, document, "image alignmentInsets")
        if extracted is None:
            return None
        values, dependencies = extracted
        entry.cache.depends_on_all(dependencies)
        updates["alignment_insets"] = EdgeInsets.from_values(values)
    if entry.render_mode is not None:
        updates["render_mode"] = entry.render_mode
    if entry.content_mode is not None:
        updates["content_mode"] = entry.content_mode
    if entry.placement is not None:
        if entry.placement not in document.placements:
            logger.warning('Can\'t find placement "%s" that image depends on', entry.placement)
            return None
        entry.cache.depends_on("placement", entry.placement)
        updates["placement"] = entry.placement

    return resolved.model_copy(update=updates) if updates else resolved


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def _from_base(entry: "ImageEntry", document: "Document") -> ResolvedImage | None:
    entry.cache.depends_on("image", entry.based_on)
    base = document.fetch_resolved("image", entry.based_on, "basedOn", "image")
    if base is None:
        return None
    return base.cache.payload


def _from_file(file_path: str, document: "Document") -> ResolvedImage | None:
    storage = document.context.storage
    if storage is None:
        raise StorageNotConfiguredError(
            f'Storage root must be set before resolving image file "{file_path}"'
        )
    path = storage / file_path
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning('Could not load image data from "%s": %s', file_path, exc)
        return None
    if not data:
        logger.warning('Image file "%s" is empty', file_path)
        return None
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except OSError as exc:
        logger.warning('Could not create image with data from "%s": %s', file_path, exc)
        return None
    return ResolvedImage(image=img)


def _from_background(
    background: "SimpleBackground", entry: "ImageEntry", document: "Document"
) -> ResolvedImage | None:
    colors: dict[str, Color | None] = {"fillColor": None, "strokeColor": None}
    for key, name in (("fillColor", background.fill_color), ("strokeColor", background.stroke_color)):
        if name is None:
            continue
        found = document.fetch_resolved("color", name, key, "image")
        if found is None:
            return None
        entry.cache.depends_on("color", name)
        colors[key] = found.cache.payload

    metrics = {"lineWidth": 0.0, "cornerRadius": 0.0, "minimumWidth": 0.0, "minimumHeight": 0.0}
    for key, raw in (
        ("lineWidth", background.line_width),
        ("cornerRadius", background.corner_radius),
        ("minimumWidth", background.minimum_width),
        ("minimumHeight", background.minimum_height),
    ):
        if raw is None:
            continue
        extracted = extract_one_metric(raw, document, f"simple background image.{key}")
        if extracted is None:
            return None
        metrics[key], dependencies = extracted
        entry.cache.depends_on_all(dependencies)

    return make_background(
        fill_color=colors["fillColor"],
        stroke_color=colors["strokeColor"],
        line_width=metrics["lineWidth"],
        corner_radius=metrics["cornerRadius"],
        minimum_width=metrics["minimumWidth"],
        minimum_height=metrics["minimumHeight"],
    )


def make_background(
    fill_color: Color | None = None,
    stroke_color: Color | None = None,
    line_width: float = 0.0,
    corner_radius: float = 0.0,
    minimum_width: float = 0.0,
    minimum_height: float = 0.0,
) -> ResolvedImage:
    """Draw a stretchable rounded rectangle.

    The corners (or the line, if wider) form fixed caps on every side, and a
    small flexible centre lets the image stretch to any larger size. With
    nothing to draw, the result is an empty 0x0 image.
    """
    if fill_color is None and (stroke_color is None or line_width <= 0):
        return ResolvedImage(image=Image.new("RGBA", (0, 0)))

    radius = max(corner_radius, 0.0)
    fixed_caps = max(line_width, radius)
    min_side = 2 * fixed_caps + FLEXIBLE_CENTRE
    width = math.ceil(max(minimum_width, min_side))
    height = math.ceil(max(minimum_height, min_side))

    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    bounds = (0, 0, width - 1, height - 1)
    pixel_radius = round(radius)
    if fill_color is not None:
        draw.rounded_rectangle(bounds, radius=pixel_radius, fill=fill_color.as_rgba8())
    if stroke_color is not None and line_width > 0:
        # Pillow strokes inwards from the box, matching a path inset by half the line width.
        draw.rounded_rectangle(
            bounds, radius=pixel_radius, outline=stroke_color.as_rgba8(), width=max(1, round(line_width))
        )
    return ResolvedImage(image=img, cap_insets=EdgeInsets.all(fixed_caps))
