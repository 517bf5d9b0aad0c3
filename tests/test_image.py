"""Tests for the image resolver."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from conftest import build_document
from models.values import INVALID_IMAGE, Color, EdgeInsets
from resolvers.image import StorageNotConfiguredError, make_background

PLACEMENTS = {
    "logo_banner": {
        "relativeDimensions": [
            {"dimension": "width", "relation": "eq", "relativeTo": "super", "multiplier": 0.3, "constant": 0}
        ]
    }
}


def _document(storage: Path | None, **images):
    return build_document(
        storage=storage,
        metrics={"size_body": "14"},
        colors={"fill": "rgb/255/0/0", "ink": "w/0", "broken": "rgb/1"},
        placements=PLACEMENTS,
        images={"image0": {"filePath": "logo.png"}, **images},
    )


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

class TestFileImages:
    def test_loads_png(self, brand_dir):
        image = _document(brand_dir).resolved_image("image0")
        assert image is not INVALID_IMAGE
        assert image.size == (64, 32)
        assert image.cap_insets is None

    @pytest.mark.parametrize("file_path", ["missing.png", "empty.png", "notes.txt"])
    def test_unusable_file_is_invalid(self, brand_dir, file_path):
        document = _document(brand_dir, bad={"filePath": file_path})
        assert document.resolved_image("bad") is INVALID_IMAGE

    def test_no_storage_is_a_usage_error(self):
        document = _document(None)
        with pytest.raises(StorageNotConfiguredError):
            document.resolved_image("image0")

    def test_based_on_file(self, brand_dir):
        document = _document(brand_dir, copy={"basedOn": "image0"})
        assert document.resolved_image("copy").size == (64, 32)
        assert document.images["copy"].cache.dependencies == [("image", "image0")]

    def test_based_on_missing_is_invalid(self, brand_dir):
        document = _document(brand_dir, orphan={"basedOn": "nobody"})
        assert document.resolved_image("orphan") is INVALID_IMAGE

    def test_based_on_invalid_is_invalid(self, brand_dir):
        document = _document(brand_dir, bad={"filePath": "empty.png"}, child={"basedOn": "bad"})
        assert document.resolved_image("child") is INVALID_IMAGE


class TestBackgroundImages:
    def test_fill_and_stroke(self, brand_dir):
        document = _document(brand_dir, bg={"makeBackground": {
            "fillColor": "fill", "strokeColor": "ink", "lineWidth": "2", "cornerRadius": "6",
        }})
        image = document.resolved_image("bg")
        # 2 * max(lineWidth, cornerRadius) + 4
        assert image.size == (16, 16)
        assert image.cap_insets == EdgeInsets.all(6.0)
        assert image.image.getpixel((8, 8)) == (255, 0, 0, 255)
        assert image.image.getpixel((8, 0)) == (0, 0, 0, 255)

    def test_minimum_size(self, brand_dir):
        document = _document(brand_dir, bg={"makeBackground": {
            "fillColor": "fill", "minimumWidth": "add/40/4", "minimumHeight": "size_body",
        }})
        assert document.resolved_image("bg").size == (44, 14)

    def test_dependencies_recorded(self, brand_dir):
        document = _document(brand_dir, bg={"makeBackground": {"fillColor": "fill", "minimumHeight": "size_body"}})
        document.resolved_image("bg")
        assert document.images["bg"].cache.dependencies == [("color", "fill"), ("metric", "size_body")]

    def test_nothing_to_draw_gives_empty_image(self, brand_dir):
        document = _document(brand_dir, bg={"makeBackground": {"strokeColor": "ink"}})
        image = document.resolved_image("bg")
        assert image is not INVALID_IMAGE
        assert image.size == (0, 0)

    @pytest.mark.parametrize("background", [
        {"fillColor": "broken"},
        {"fillColor": "missing"},
        {"fillColor": "fill", "lineWidth": "wide"},
        {"fillColor": "fill", "cornerRadius": "1/2"},
    ])
    def test_bad_parameters_are_invalid(self, brand_dir, background):
        document = _document(brand_dir, bg={"makeBackground": background})
        assert document.resolved_image("bg") is INVALID_IMAGE

    def test_make_background_directly(self):
        image = make_background(fill_color=Color.from_white(1.0), corner_radius=-3)
        assert image.size == (4, 4)
        assert image.cap_insets == EdgeInsets.all(0.0)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

class TestModifiers:
    @pytest.mark.parametrize("raw, expected", [
        ("64/96/54/106", EdgeInsets(top=64, left=96, bottom=54, right=106)),
        (" 20//20/", EdgeInsets(top=20, left=0, bottom=20, right=0)),
        (" 2.0/0x7f/20/ ", EdgeInsets(top=2, left=127, bottom=20, right=0)),
    ])
    def test_alignment_insets(self, brand_dir, raw, expected):
        document = _document(brand_dir, inset={"basedOn": "image0", "alignmentInsets": raw})
        assert document.resolved_image("inset").alignment_insets == expected

    @pytest.mark.parametrize("raw", ["64,96,54,106", "64,0///", "1/2/3"])
    def test_bad_alignment_insets(self, brand_dir, raw):
        document = _document(brand_dir, inset={"filePath": "logo.png", "alignmentInsets": raw})
        assert document.resolved_image("inset") is INVALID_IMAGE

    @pytest.mark.parametrize("raw, expected", [
        ("template", "template"),
        ("alwaysTemplate", "template"),
        ("original", "original"),
        ("alwaysOriginal", "original"),
        ("automatic", "automatic"),
    ])
    def test_render_mode(self, brand_dir, raw, expected):
        document = _document(brand_dir, rm={"basedOn": "image0", "renderMode": raw})
        assert document.resolved_image("rm").render_mode == expected

    def test_render_mode_is_inherited(self, brand_dir):
        document = _document(
            brand_dir,
            tmpl={"basedOn": "image0", "renderMode": "template"},
            child={"basedOn": "tmpl", "contentMode": "center"},
        )
        image = document.resolved_image("child")
        assert image.render_mode == "template"
        assert image.content_mode == "center"

    def test_base_is_not_modified(self, brand_dir):
        document = _document(brand_dir, tmpl={"basedOn": "image0", "renderMode": "template"})
        document.resolved_image("tmpl")
        assert document.resolved_image("image0").render_mode is None

    def test_placement(self, brand_dir):
        document = _document(brand_dir, placed={"filePath": "logo.png", "placement": "logo_banner"})
        assert document.resolved_image("placed").placement == "logo_banner"

    def test_missing_placement_is_invalid(self, brand_dir):
        document = _document(brand_dir, placed={"filePath": "logo.png", "placement": "wrong"})
        assert document.resolved_image("placed") is INVALID_IMAGE


# ---------------------------------------------------------------------------
# Decode-time errors
# ---------------------------------------------------------------------------

class TestDecodeErrors:
    @pytest.mark.parametrize("entry", [
        {},
        {"basedOn": "a", "filePath": "b"},
        {"filePath": "b", "makeBackground": {}},
        {"renderMode": "auto"},
        {"filePath": "b", "renderMode": "auto"},
        {"filePath": "b", "contentMode": "stretch"},
    ])
    def test_rejected(self, entry):
        with pytest.raises(ValidationError):
            build_document(images={"image": entry})

    def test_space_in_name(self):
        with pytest.raises(ValidationError):
            build_document(images={"my image": {"filePath": "b"}})
