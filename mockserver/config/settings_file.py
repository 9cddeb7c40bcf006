"""
Reading and writing the endpoint settings document.

The document lives in a JSON file (``settings.json`` by default). It is
read once at startup and rewritten after every accepted hot edit.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mockserver.core.exceptions import SettingsDocumentError, SettingsWriteError
from mockserver.models.settings import SettingsDocument

from .logging import get_logger

logger = get_logger(__name__)


def parse_settings_document(data: Any) -> SettingsDocument:
    """
    Validate decoded JSON as a settings document.

    Args:
        data: Decoded JSON value

    Returns:
        The validated document

    Raises:
        SettingsDocumentError: The value does not have the document shape
    """
    try:
        return SettingsDocument.model_validate(data)
    except ValidationError as e:
        raise SettingsDocumentError(
            "Invalid configuration document",
            errors=json.loads(e.json(include_url=False))
        ) from e


def load_settings_document(path: Path) -> SettingsDocument:
    """
    Load the settings document from a JSON file.

    Args:
        path: Settings file path

    Returns:
        The validated document

    Raises:
        SettingsDocumentError: The file is missing, unreadable or invalid
    """
    try:
        with open(path, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except OSError as e:
        raise SettingsDocumentError(f"Failed to open settings file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SettingsDocumentError(f"Failed to parse settings file {path}: {e}") from e

    document = parse_settings_document(data)
    logger.info(f"Loaded {len(document.endpoints)} endpoints from {path}")
    return document


def write_settings_document(path: Path, document: SettingsDocument) -> None:
    """
    Write the settings document to a JSON file.

    The document is written to a temporary file next to ``path`` and then
    moved over it, so readers never see a partially written file.

    Args:
        path: Settings file path
        document: Document to write

    Raises:
        SettingsWriteError: The file could not be written
    """
    path = Path(path)

    try:
        fd, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as file:
                json.dump(document.to_dict(), file, indent=2, ensure_ascii=False)
                file.write("\n")
            os.replace(temp_name, path)
        except BaseException:
            os.unlink(temp_name)
            raise
    except OSError as e:
        logger.error(f"Failed to write settings to file {path}: {e}")
        raise SettingsWriteError(f"Failed to write settings to file {path}: {e}") from e

    logger.debug(f"Wrote {len(document.endpoints)} endpoints to {path}")
