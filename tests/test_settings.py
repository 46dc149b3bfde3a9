"""Tests for settings loading."""

import tempfile
from pathlib import Path

import pytest

from python_refnotes.errors import ValidationError
from python_refnotes.settings import ReferencesSettings, load_settings


def write_settings(content: str) -> Path:
    path = Path(tempfile.mkdtemp()) / "refnotes.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestReferencesSettings:
    """Tests for the settings dataclass."""

    def test_defaults(self):
        """Test default prefixes, classes and priorities."""
        settings = ReferencesSettings()
        assert settings.footnote_id_prefix == "x_reference_"
        assert settings.footnote_reference_id_prefix == "x_reference_pre_"
        assert settings.list_class == "references"
        assert settings.list_item_class == "reference"
        assert settings.ensurer_priority < settings.default_priority

    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ReferencesSettings.from_dict({"colour": "red"})
        assert exc_info.value.errors == ["Unknown setting 'colour'"]

    def test_from_dict_wrong_type(self):
        """Test values of the wrong type are rejected."""
        with pytest.raises(ValidationError):
            ReferencesSettings.from_dict({"max_executions": "many"})
        with pytest.raises(ValidationError):
            ReferencesSettings.from_dict({"max_executions": True})


class TestLoadSettings:
    """Tests for loading settings from YAML."""

    def test_load_from_file(self):
        """Test values from the references section override defaults."""
        path = write_settings(
            "references:\n  footnote_id_prefix: note-\n  max_executions: 50\n"
        )
        settings = load_settings(path)
        assert settings.footnote_id_prefix == "note-"
        assert settings.max_executions == 50
        assert settings.list_class == "references"

    def test_no_path_no_env(self, monkeypatch):
        """Test defaults are used without a path or environment variable."""
        monkeypatch.delenv("REFNOTES_CONFIG", raising=False)
        assert load_settings() == ReferencesSettings()

    def test_env_variable(self, monkeypatch):
        """Test the REFNOTES_CONFIG environment variable is consulted."""
        path = write_settings("references:\n  list_class: notes\n")
        monkeypatch.setenv("REFNOTES_CONFIG", str(path))
        assert load_settings().list_class == "notes"

    def test_empty_file(self):
        """Test an empty file yields defaults."""
        assert load_settings(write_settings("")) == ReferencesSettings()

    def test_missing_file(self):
        """Test a missing explicit path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_settings("/nonexistent/refnotes.yaml")

    def test_invalid_yaml(self):
        """Test unparsable YAML raises ValidationError."""
        with pytest.raises(ValidationError, match="Failed to parse"):
            load_settings(write_settings("references: [unclosed\n"))

    def test_non_mapping(self):
        """Test a top-level list raises ValidationError."""
        with pytest.raises(ValidationError):
            load_settings(write_settings("- a\n- b\n"))

    def test_section_not_mapping(self):
        """Test a non-mapping references section raises ValidationError."""
        with pytest.raises(ValidationError):
            load_settings(write_settings("references: 3\n"))
