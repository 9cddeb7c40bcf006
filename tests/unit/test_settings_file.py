"""Unit tests for reading and writing the settings file."""

import json
from unittest.mock import patch

import pytest

from mockserver.config.settings_file import (
    load_settings_document,
    parse_settings_document,
    write_settings_document,
)
from mockserver.core.exceptions import SettingsDocumentError, SettingsWriteError
from mockserver.models.settings import SettingsDocument
from tests.fixtures import make_document, make_endpoint


class TestParseSettingsDocument:
    """Test cases for parse_settings_document."""

    def test_parse_settings_document_valid(self, sample_document):
        document = parse_settings_document(sample_document)

        assert isinstance(document, SettingsDocument)

    def test_parse_settings_document_collects_errors(self):
        with pytest.raises(SettingsDocumentError) as exc_info:
            parse_settings_document(make_document([make_endpoint("/a", status=42)]))

        errors = exc_info.value.errors
        assert errors
        assert errors[0]["loc"] == ["endpoints", 0, "status"]

    def test_parse_settings_document_rejects_non_object(self):
        with pytest.raises(SettingsDocumentError):
            parse_settings_document("not a document")


class TestLoadSettingsDocument:
    """Test cases for load_settings_document."""

    def test_load_settings_document(self, settings_path):
        document = load_settings_document(settings_path)

        assert len(document.endpoints) == 4

    def test_load_settings_document_missing_file(self, temp_directory):
        with pytest.raises(SettingsDocumentError) as exc_info:
            load_settings_document(temp_directory / "absent.json")

        assert "Failed to open" in exc_info.value.message

    def test_load_settings_document_invalid_json(self, temp_directory):
        path = temp_directory / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SettingsDocumentError) as exc_info:
            load_settings_document(path)

        assert "Failed to parse" in exc_info.value.message


class TestWriteSettingsDocument:
    """Test cases for write_settings_document."""

    def test_write_settings_document_round_trip(self, temp_directory, sample_document):
        path = temp_directory / "out.json"
        document = SettingsDocument.model_validate(sample_document)

        write_settings_document(path, document)

        assert json.loads(path.read_text(encoding="utf-8")) == sample_document
        assert load_settings_document(path) == document

    def test_write_settings_document_leaves_no_temp_files(self, temp_directory, sample_document):
        path = temp_directory / "out.json"

        write_settings_document(path, SettingsDocument.model_validate(sample_document))

        assert [p.name for p in temp_directory.iterdir()] == ["out.json"]

    def test_write_settings_document_missing_directory(self, temp_directory, sample_document):
        path = temp_directory / "missing" / "out.json"

        with pytest.raises(SettingsWriteError):
            write_settings_document(path, SettingsDocument.model_validate(sample_document))

    def test_write_settings_document_failed_replace_keeps_old_file(
        self, settings_path, sample_document
    ):
        """A failed write leaves the previous file intact and cleans up."""
        original = settings_path.read_text(encoding="utf-8")
        replacement = SettingsDocument.model_validate(make_document([]))

        with patch("mockserver.config.settings_file.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(SettingsWriteError):
                write_settings_document(settings_path, replacement)

        assert settings_path.read_text(encoding="utf-8") == original
        assert [p.name for p in settings_path.parent.iterdir()] == ["settings.json"]
