"""Tests for yaml_loader.py - list data loading and merging."""

import pytest

from yaml_loader import (
    LoadedData,
    SigilDataError,
    create_sigil_data,
    extract_templates,
    load_sigil_data,
    load_yaml_file,
    merge_lists,
    parse_yaml_content,
)

from conftest import write_yaml


class TestParseYamlContent:
    """Tests for single-document parsing."""

    def test_mapping(self):
        assert parse_yaml_content("colors:\n  - red\n  - blue\n") == {"colors": ["red", "blue"]}

    def test_empty_document(self):
        assert parse_yaml_content("") == {}

    def test_invalid_yaml(self):
        with pytest.raises(SigilDataError, match="Failed to parse YAML from test.yaml"):
            parse_yaml_content("key: [unclosed", source="test.yaml")

    def test_top_level_must_be_mapping(self):
        with pytest.raises(SigilDataError, match="must be a mapping, got list"):
            parse_yaml_content("- a\n- b\n")

    def test_weights_survive_as_text(self):
        data = parse_yaml_content("weapons:\n  - sword ^2\n  - axe\n")
        assert data["weapons"] == ["sword ^2", "axe"]


class TestLoadYamlFile:
    """Tests for file loading."""

    def test_load(self, temp_dir):
        path = write_yaml(temp_dir, "lists.yaml", "animals:\n  - cat\n")
        assert load_yaml_file(path) == {"animals": ["cat"]}

    def test_missing_file(self, temp_dir):
        with pytest.raises(SigilDataError, match="Failed to load YAML file"):
            load_yaml_file(temp_dir / "missing.yaml")

    def test_error_names_file(self, temp_dir):
        path = write_yaml(temp_dir, "broken.yaml", "a: [")
        with pytest.raises(SigilDataError, match="broken.yaml"):
            load_yaml_file(path)


class TestMergeLists:
    """Tests for document merging."""

    def test_lists_concatenate(self):
        merged = merge_lists([{"weapons": ["sword"]}, {"weapons": ["axe", "mace"]}])
        assert merged == {"weapons": ["sword", "axe", "mace"]}

    def test_mappings_merge_recursively(self):
        merged = merge_lists([
            {"armor": {"light": ["leather"], "meta": {"tier": ["1"]}}},
            {"armor": {"light": ["silk"], "heavy": ["plate"], "meta": {"tier": ["2"]}}},
        ])
        assert merged == {
            "armor": {
                "light": ["leather", "silk"],
                "heavy": ["plate"],
                "meta": {"tier": ["1", "2"]},
            }
        }

    def test_scalars_last_wins(self):
        merged = merge_lists([{"title": "first", "nested": {"v": 1}}, {"title": "second", "nested": {"v": 2}}])
        assert merged == {"title": "second", "nested": {"v": 2}}

    def test_type_change_replaces(self):
        assert merge_lists([{"x": "scalar"}, {"x": ["a"]}]) == {"x": ["a"]}
        assert merge_lists([{"x": ["a"]}, {"x": {"y": ["b"]}}]) == {"x": {"y": ["b"]}}

    def test_inputs_not_mutated(self):
        first = {"weapons": ["sword"], "armor": {"light": ["leather"]}}
        merge_lists([first, {"weapons": ["axe"], "armor": {"light": ["silk"]}}])
        assert first == {"weapons": ["sword"], "armor": {"light": ["leather"]}}

    def test_templates_key_skipped(self):
        assert merge_lists([{"templates": {"a": "b"}, "x": ["y"]}]) == {"x": ["y"]}


class TestExtractTemplates:
    """Tests for named template collection."""

    def test_list_and_scalar_entries(self):
        templates = extract_templates([{"templates": {"loot": ["[a]", "[b] ^2"], "greeting": "Hello"}}])
        assert templates == {"loot": ["[a]", "[b] ^2"], "greeting": ["Hello"]}

    def test_later_documents_override(self):
        templates = extract_templates([
            {"templates": {"a": "first", "b": "keep"}},
            {"templates": {"a": "second"}},
        ])
        assert templates == {"a": ["second"], "b": ["keep"]}

    def test_ignores_non_mapping_section(self):
        assert extract_templates([{"templates": ["not", "a", "mapping"]}]) == {}

    def test_skips_null_entries(self):
        assert extract_templates([{"templates": {"a": None, "b": ["x", None]}}]) == {"b": ["x"]}


class TestLoadSigilData:
    """Tests for the loading entry points."""

    def test_create_from_strings(self):
        data = create_sigil_data([
            "colors:\n  - red\ntemplates:\n  swatch: '[colors]'\n",
            "colors:\n  - blue\n",
        ])
        assert data == LoadedData(lists={"colors": ["red", "blue"]}, templates={"swatch": ["[colors]"]})

    def test_create_reports_document_number(self):
        with pytest.raises(SigilDataError, match="document 2"):
            create_sigil_data(["a: [b]", "- not a mapping"])

    def test_load_files_in_order(self, temp_dir):
        first = write_yaml(temp_dir, "a.yaml", "names:\n  - Ann\n")
        second = write_yaml(temp_dir, "b.yaml", "names:\n  - Bob\n")
        data = load_sigil_data([first, second])
        assert data.lists == {"names": ["Ann", "Bob"]}
        assert data.templates == {}

    def test_load_no_files(self):
        assert load_sigil_data([]) == LoadedData()
