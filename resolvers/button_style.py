"""Button-style resolver.

Per-state title attributes and images plus whole-button insets, tint and icon
side. Problems in one state do not stop the other states being checked, but
any problem at all makes the whole style invalid.
"""
import logging
from typing import TYPE_CHECKING

from models.values import (
    INVALID_BUTTON_STYLE,
    ButtonState,
    ButtonStateStyle,
    ButtonStyle,
    EdgeInsets,
)
from resolvers.metric import extract_insets

if TYPE_CHECKING:
    from models.document import Document
    from models.entries import ButtonStyleEntry, StyleElementNames

logger = logging.getLogger(__name__)


def resolve(entry: "ButtonStyleEntry", document: "Document") -> ButtonStyle:
    return entry.cache.resolve(
        document.lock,
        lambda: _compute(entry, document),
        INVALID_BUTTON_STYLE,
        label=f"button style {entry.model_dump(by_alias=True, exclude_none=True)}",
    )


def _compute(entry: "ButtonStyleEntry", document: "Document") -> ButtonStyle | None:
    errors = 0
    state_styles: dict[ButtonState, ButtonStateStyle] = {}

    states: list[tuple[ButtonState, "StyleElementNames | None"]] = [
        ("normal", entry.normal_style),
        ("highlighted", entry.highlighted_style),
        ("disabled", entry.disabled_style),
        ("selected", entry.selected_style),
    ]
    for state, names in states:
        if names is None:
            continue
        style, state_errors = _state_style(names, entry, document)
        errors += state_errors
        if style is not None:
            state_styles[state] = style

    content_insets: EdgeInsets | None = None
    if entry.content_insets is not None:
        extracted = extract_insets(entry.content_insets, document, "button style contentInsets")
        if extracted is None:
            errors += 1
        else:
            values, dependencies = extracted
            entry.cache.depends_on_all(dependencies)
            content_insets = EdgeInsets.from_values(values)

    tint_color = None
    if entry.tint_color is not None:
        found = document.fetch_resolved("color", entry.tint_color, "tintColor", "buttonStyle")
        if found is None:
            errors += 1
        else:
            entry.cache.depends_on("color", entry.tint_color)
            tint_color = found.cache.payload

    if errors:
        logger.warning("Found %d error(s) resolving button style", errors)
        return None
    return ButtonStyle(
        state_styles=state_styles,
        content_insets=content_insets,
        tint_color=tint_color,
        reverse_icon_side=bool(entry.reverse_icon_side),
    )


def _state_style(
    names: "StyleElementNames", entry: "ButtonStyleEntry", document: "Document"
) -> tuple[ButtonStateStyle | None, int]:
    """Resolve one state's elements; returns the style (None if empty or broken) and an error count."""
    errors = 0
    values = {}
    for field, key, kind in (
        ("title_attributes", "titleAttributes", "textAttributes"),
        ("title_image", "titleImage", "image"),
        ("background_image", "backgroundImage", "image"),
    ):
        name = getattr(names, field)
        if name is None:
            continue
        found = document.fetch_resolved(kind, name, key, "buttonStyle")
        if found is None:
            errors += 1
            continue
        entry.cache.depends_on(kind, name)
        values[field] = found.cache.payload

    if errors or not values:
        return None, errors
    return ButtonStateStyle(**values), 0
