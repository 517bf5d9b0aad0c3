"""Tests for the button-style resolver."""
import pytest

from conftest import build_document
from models.values import INVALID_BUTTON_STYLE, Color, EdgeInsets


def _document(**button_styles):
    return build_document(
        metrics={"pad": "8", "size_body": "14"},
        colors={"accent": "rgb/255/128/0", "white": "w/1", "broken": "rgb/1"},
        fonts={"body": {"family": "Helvetica", "size": "size_body"}},
        textAttributes={
            "title": {"attributes": {"font": "body", "foregroundColor": "white"}},
            "bad_title": {"attributes": {"font": "missing"}},
        },
        images={
            "bg": {"makeBackground": {"fillColor": "accent", "cornerRadius": "4"}},
            "bg_dim": {"basedOn": "bg", "renderMode": "template"},
        },
        buttonStyles=button_styles,
    )


# ---------------------------------------------------------------------------
# Valid styles
# ---------------------------------------------------------------------------

class TestButtonStyle:
    def test_full_style(self):
        document = _document(primary={
            "normalStyle": {"titleAttributes": "title", "backgroundImage": "bg"},
            "disabledStyle": {"backgroundImage": "bg_dim"},
            "contentInsets": "pad/pad/pad/add/pad/pad",
            "tintColor": "accent",
            "reverseIconSide": True,
        })
        style = document.resolved_button_style("primary")
        assert set(style.state_styles) == {"normal", "disabled"}
        normal = style.state_styles["normal"]
        assert normal.title_attributes.font.name == "Helvetica"
        assert normal.background_image.size == (12, 12)
        assert normal.title_image is None
        assert style.state_styles["disabled"].background_image.render_mode == "template"
        assert style.tint_color == Color(red=1.0, green=128 / 255, blue=0.0)
        assert style.content_insets == EdgeInsets(top=8, left=8, bottom=8, right=16)
        assert style.reverse_icon_side is True

    def test_content_insets(self):
        document = _document(padded={"contentInsets": "pad/16/pad/16"})
        assert document.resolved_button_style("padded").content_insets == EdgeInsets(top=8, left=16, bottom=8, right=16)

    def test_defaults(self):
        style = _document(plain={}).resolved_button_style("plain")
        assert style.state_styles == {}
        assert style.content_insets is None
        assert style.tint_color is None
        assert style.reverse_icon_side is False

    def test_empty_style_equals_sentinel_but_is_valid(self):
        document = _document(plain={})
        assert document.resolved_button_style("plain") == INVALID_BUTTON_STYLE
        assert document.button_styles["plain"].cache.is_valid()

    def test_dependencies_recorded(self):
        document = _document(primary={"normalStyle": {"titleAttributes": "title"}, "tintColor": "accent"})
        document.resolved_button_style("primary")
        assert document.button_styles["primary"].cache.dependencies == [
            ("textAttributes", "title"),
            ("color", "accent"),
        ]


# ---------------------------------------------------------------------------
# Invalid styles
# ---------------------------------------------------------------------------

class TestFailBadButtonStyle:
    @pytest.mark.parametrize("entry", [
        {"normalStyle": {"titleAttributes": "bad_title"}},
        {"highlightedStyle": {"titleImage": "missing"}},
        {"selectedStyle": {"backgroundImage": "missing"}},
        {"contentInsets": "1/2/3"},
        {"contentInsets": "pad/pad/pad/oops"},
        {"tintColor": "broken"},
        {"tintColor": "nowhere"},
    ])
    def test_resolves_to_invalid(self, entry):
        style = _document(bad=entry).resolved_button_style("bad")
        assert style == INVALID_BUTTON_STYLE
        assert style.state_styles == {}

    def test_one_bad_state_invalidates_good_states(self, caplog):
        document = _document(bad={
            "normalStyle": {"backgroundImage": "bg"},
            "highlightedStyle": {"backgroundImage": "missing"},
            "selectedStyle": {"titleImage": "missing_too"},
        })
        assert document.resolved_button_style("bad") == INVALID_BUTTON_STYLE
        assert not document.button_styles["bad"].cache.is_valid()
        assert '"missing"' in caplog.text
        assert '"missing_too"' in caplog.text
        assert "Found 2 error(s)" in caplog.text

    def test_missing_entry_returns_sentinel(self):
        assert _document().resolved_button_style("nothing") == INVALID_BUTTON_STYLE
