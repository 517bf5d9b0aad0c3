"""Tests for Document decoding, group merging, lookups and round-tripping."""
import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from conftest import build_document
from models.document import Document
from models.entries import ColorEntry, MetricEntry, PlacementEntry
from models.values import INVALID_COLOR, INVALID_METRIC


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

class TestDecode:
    def test_sample_document(self, appearance_json):
        document = Document.from_bytes(appearance_json.read_bytes())
        assert document.version == 1
        assert set(document.metrics) >= {"size_heading", "spacing"}
        assert isinstance(document.colors["brand_red"], ColorEntry)
        assert document.fonts["heading"].based_on == "base"
        assert document.images["button_bg"].make_background.corner_radius == "corner"

    def test_all_sections_optional(self):
        document = Document.from_bytes("{}")
        assert document.metrics == {}
        assert document.other_parameters == {}

    def test_unknown_top_level_keys_ignored(self):
        document = Document.from_bytes('{"version": 2, "comment": "hello"}')
        assert document.version == 2

    @pytest.mark.parametrize("section, entries", [
        ("metrics", {"a b": "1"}),
        ("colors", {"a b": "w/1"}),
        ("fonts", {"a b": {"family": "Georgia"}}),
        ("textAttributes", {"a b": {}}),
        ("placements", {"a b": {}}),
        ("images", {"a b": {"filePath": "x.png"}}),
        ("buttonStyles", {"a b": {}}),
        ("otherParameters", {"a b": 1}),
    ])
    def test_space_in_name_fails(self, section, entries):
        with pytest.raises(ValidationError):
            build_document(**{section: entries})

    def test_empty_metric_under_spaced_key_is_a_comment(self):
        document = build_document(metrics={"-- sizes below --": "", "gap": "4"})
        assert document.resolved_metric("gap") == 4.0
        assert document.resolved_metric("-- sizes below --") == INVALID_METRIC

    def test_null_parameter_under_spaced_key_is_a_comment(self):
        document = build_document(otherParameters={"about this section": None})
        assert document.other_parameters["about this section"].raw is None

    def test_unknown_layout_relation_fails(self):
        with pytest.raises(ValidationError):
            build_document(placements={"p": {"relativeDimensions": [
                {"dimension": "width", "relation": "about", "relativeTo": "super"}
            ]}})

    @pytest.mark.parametrize("raw, expected", [
        ("<=", "lessThanOrEqual"),
        ("LE", "lessThanOrEqual"),
        ("eq", "equal"),
        ("==", "equal"),
        (">=", "greaterThanOrEqual"),
        ("ge", "greaterThanOrEqual"),
    ])
    def test_layout_relation_aliases(self, raw, expected):
        document = build_document(placements={"p": {"relativeDimensions": [
            {"dimension": "height", "relation": raw, "relativeTo": "title"}
        ]}})
        dimension = document.placements["p"].relative_dimensions[0]
        assert dimension.relation == expected
        assert dimension.multiplier == 1.0
        assert dimension.constant == 0.0

    def test_wrong_value_type_fails(self):
        with pytest.raises(ValidationError):
            build_document(colors={"c": 12})


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

class TestGroups:
    def test_groups_merge_with_prefix(self):
        document = build_document(
            metrics={"gap": "4"},
            groups={"onboarding": {
                "metrics": {"margin": "mul/gap/2"},
                "colors": {"tint": "w/1"},
            }},
        )
        assert document.groups is None
        assert set(document.metrics) == {"gap", "onboarding.margin"}
        assert document.resolved_metric("onboarding.margin") == 8.0
        assert "onboarding.tint" in document.colors

    def test_nested_groups(self):
        document = build_document(groups={"a": {"groups": {"b": {"metrics": {"x": "1"}}}}})
        assert document.resolved_metric("a.b.x") == 1.0

    def test_duplicate_merged_name_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            build_document(
                metrics={"onboarding.margin": "1"},
                groups={"onboarding": {"metrics": {"margin": "2"}}},
            )
        assert "duplicate" in str(exc_info.value)

    def test_sample_document_group(self, appearance_json):
        document = Document.from_bytes(appearance_json.read_bytes())
        assert document.resolved_metric("onboarding.page_margin") == 24.0


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

class TestLookups:
    def test_missing_names_return_sentinels(self, caplog):
        document = build_document()
        assert document.resolved_metric("x") == INVALID_METRIC
        assert document.resolved_color("x") == INVALID_COLOR
        assert document.placement("x") is None
        assert document.parameter("x") is None
        assert 'No metric entry named "x"' in caplog.text

    def test_placement_returns_entry(self):
        document = build_document(placements={"p": {"placementRules": "H:|-[image]-|", "contentMode": "center"}})
        placement = document.placement("p")
        assert isinstance(placement, PlacementEntry)
        assert placement.placement_rules == "H:|-[image]-|"
        assert placement.resolved(document) is placement

    def test_fetch_resolved_rejects_invalid(self, caplog):
        document = build_document(colors={"bad": "rgb/1"})
        assert document.fetch_resolved("color", "bad", "tintColor", "buttonStyle") is None
        assert "which is not valid" in caplog.text

    def test_entries_by_kind(self):
        document = build_document(metrics={"a": "1"})
        assert document.entries("metric") is document.metrics
        assert document.entries("customParameters") is document.other_parameters


# ---------------------------------------------------------------------------
# Round-trip and caching
# ---------------------------------------------------------------------------

class TestRoundTrip:
    def test_raw_entries_survive_round_trip(self, appearance_json):
        original = Document.from_bytes(appearance_json.read_bytes())
        original.resolved_button_style("primary")
        copy = Document.from_bytes(original.dump_json())
        assert copy.dump_dict() == original.dump_dict()
        assert copy.colors["brand_red"].raw == "rgb/173/82/76"
        assert copy.metrics["onboarding.page_margin"].raw == "add/spacing/spacing_double"

    def test_caches_are_not_persisted(self, appearance_json):
        document = Document.from_bytes(appearance_json.read_bytes())
        document.resolved_metric("spacing")
        dumped = document.dump_dict()
        assert dumped["metrics"]["spacing"] == "8"
        assert "groups" not in dumped
        assert "_cache" not in json.dumps(dumped)

    def test_render_mode_alias_encodes_canonical(self):
        document = build_document(images={"i": {"filePath": "x.png", "renderMode": "alwaysTemplate"}})
        assert document.dump_dict()["images"]["i"]["renderMode"] == "template"

    def test_resolving_twice_returns_identical_value(self):
        document = build_document(colors={"c": "rgb/10/20/30"})
        first = document.resolved_color("c")
        assert document.resolved_color("c") is first

    def test_decoding_again_gives_fresh_caches(self):
        data = json.dumps({"metrics": {"a": "1"}})
        first = Document.from_bytes(data)
        first.resolved_metric("a")
        second = Document.from_bytes(data)
        assert first.metrics["a"].cache.is_loaded()
        assert not second.metrics["a"].cache.is_loaded()


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------

class TestLoad:
    def test_load_json_sets_storage(self, brand_dir):
        document = Document.load(brand_dir / "appearance.json")
        assert document.context.storage == brand_dir

    def test_load_yaml(self, tmp_path: Path, appearance_json):
        data = json.loads(appearance_json.read_text(encoding="utf-8"))
        path = tmp_path / "appearance.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        document = Document.load(path)
        assert document.resolved_metric("spacing_double") == 16.0

    def test_load_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            Document.load(tmp_path / "nope.json")

    def test_load_malformed_json_raises(self, tmp_path: Path):
        path = tmp_path / "appearance.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            Document.load(path)

    def test_decode_is_strict_about_structure(self):
        with pytest.raises(ValidationError):
            Document.from_bytes(json.dumps({"images": {"image": {}}}))

    def test_metric_entry_is_root_string(self):
        document = build_document(metrics={"a": "14"})
        assert isinstance(document.metrics["a"], MetricEntry)
        assert document.metrics["a"].raw == "14"
