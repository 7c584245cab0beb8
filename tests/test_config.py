"""Tests for the config module."""

from pathlib import Path

from sheetharvest.config import Settings, _optional_path, _parse_blank_values


class TestParseBlankValues:
    """Test blank answer placeholder parsing."""

    def test_parse_with_value(self, monkeypatch):
        """Test parsing placeholders from environment variable."""
        monkeypatch.setenv("BLANK_ANSWER_VALUES", "0, N/A ,-")
        assert _parse_blank_values() == ["0", "n/a", "-"]

    def test_parse_without_value(self, monkeypatch):
        """Test default placeholders when not set."""
        monkeypatch.delenv("BLANK_ANSWER_VALUES", raising=False)
        assert _parse_blank_values() == ["0", "n/a"]

    def test_parse_only_separators(self, monkeypatch):
        """Test a value with no entries falls back to the defaults."""
        monkeypatch.setenv("BLANK_ANSWER_VALUES", " , ,")
        assert _parse_blank_values() == ["0", "n/a"]


class TestOptionalPath:
    """Test optional path settings."""

    def test_set(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LAYOUTS_PATH", str(tmp_path / "layouts.json"))
        assert _optional_path("LAYOUTS_PATH") == tmp_path / "layouts.json"

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("LAYOUTS_PATH", raising=False)
        assert _optional_path("LAYOUTS_PATH") is None


class TestSettings:
    """Test Settings configuration."""

    def test_settings_explicit_values(self, tmp_path):
        """Test Settings built from explicit parameters."""
        settings = Settings(
            fuzzy_threshold=0.8,
            fuzzy_window=50,
            min_match_length=3,
            blank_answer_values=["-"],
            template_index_sheet="INDEX",
            catalog_path=tmp_path / "catalog.json",
            layouts_path=str(tmp_path / "layouts.json"),
            batch_workers=4,
            log_level="DEBUG",
        )

        assert settings.fuzzy_threshold == 0.8
        assert settings.fuzzy_window == 50
        assert settings.min_match_length == 3
        assert settings.blank_answer_values == ["-"]
        assert settings.template_index_sheet == "INDEX"
        assert settings.catalog_path == tmp_path / "catalog.json"
        assert isinstance(settings.layouts_path, Path)
        assert settings.batch_workers == 4
        assert settings.log_level == "DEBUG"

    def test_template_defaults(self):
        """Test the reference template defaults."""
        settings = Settings()
        assert settings.template_index_column == "A"
        assert settings.template_label_column == "E"
        assert settings.template_answer_column == "H"
        assert settings.template_first_row == 2
        assert settings.template_secondary_columns == 9

    def test_path_handling(self, tmp_path):
        """Test that paths are correctly converted to Path objects."""
        settings = Settings(
            catalog_path=str(tmp_path / "catalog.json"),
            formula_map_path=str(tmp_path / "formula-map.json"),
        )
        assert isinstance(settings.catalog_path, Path)
        assert isinstance(settings.formula_map_path, Path)
