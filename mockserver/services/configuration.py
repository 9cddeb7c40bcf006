"""
Hot-edit configuration service.

Applies a replacement configuration document: validate, compile every
endpoint, persist, then publish to the :class:`ConfigStore`. A failure at
any step leaves the previously active rule set in place.
"""

import threading
from pathlib import Path
from typing import Any, Optional

from mockserver.config import StructuredLogger
from mockserver.config.settings_file import parse_settings_document, write_settings_document
from mockserver.core.exceptions import (
    RuleSetCompileError,
    SettingsDocumentError,
    SettingsWriteError,
)
from mockserver.models.settings import SettingsDocument
from mockserver.routing.rules import compile_rule_set
from mockserver.routing.store import ConfigStore

logger = StructuredLogger(__name__)


class ConfigurationService:
    """The only path through which a new rule set reaches the store."""

    def __init__(self, store: ConfigStore, settings_file: Optional[Path] = None):
        """
        Initialize the service.

        Args:
            store: Store holding the active rule set
            settings_file: File accepted documents are written to; None
                disables persistence
        """
        self.store = store
        self.settings_file = settings_file
        # Held across persist and publish
        self._apply_lock = threading.Lock()

    def current_document(self) -> SettingsDocument:
        return self.store.current().document

    def parse(self, payload: Any) -> SettingsDocument:
        """
        Validate an update payload.

        A bare list of endpoints is accepted and keeps the current
        ``default_endpoint``.

        Raises:
            SettingsDocumentError: The payload does not have the document shape
        """
        if isinstance(payload, list):
            payload = {
                "default_endpoint": self.current_document().default_endpoint,
                "endpoints": payload,
            }
        return parse_settings_document(payload)

    def apply(self, payload: Any) -> int:
        """
        Replace the active configuration.

        Args:
            payload: Decoded JSON document, or a bare endpoint list

        Returns:
            The new configuration version

        Raises:
            SettingsDocumentError: Validation failed
            RuleSetCompileError: An endpoint path failed to compile
            SettingsWriteError: The accepted document could not be persisted
        """
        with self._apply_lock:
            return self._apply(payload)

    def _apply(self, payload: Any) -> int:
        try:
            document = self.parse(payload)
            rule_set = compile_rule_set(document)
            if self.settings_file is not None:
                write_settings_document(self.settings_file, document)
        except (SettingsDocumentError, RuleSetCompileError, SettingsWriteError) as e:
            logger.log_config_change(
                accepted=False,
                endpoint_count=len(self.store.current()),
                version=self.store.version,
                error=str(e)
            )
            raise

        version = self.store.replace(rule_set)
        logger.log_config_change(
            accepted=True,
            endpoint_count=len(rule_set),
            version=version
        )
        return version
