"""
Models for the endpoint configuration document.

The document is the unit of configuration: it is loaded from the settings
file at startup and replaced wholesale through the admin interface.
"""

import json
import re
from typing import Any, Dict, List
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

# RFC 9110 token characters
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")


class EndpointConfig(BaseModel):
    """One declared method + path + response mapping."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    method: str = Field(..., description="HTTP method, compared case-insensitively")
    path: str = Field(..., description="Path pattern with {variable} segments")
    status: int = Field(..., ge=100, le=599, description="Response status code")
    content_type: str = Field(..., min_length=1, description="Response Content-Type")
    payload: Any = Field(..., description="Response body template")

    @field_validator("method")
    @classmethod
    def validate_method(cls, value: str) -> str:
        if not _METHOD_TOKEN.match(value):
            raise ValueError("method must be a non-empty HTTP token")
        return value

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value

    @property
    def payload_template(self) -> str:
        """The payload as template text.

        Strings are used as-is; any other JSON value is rendered as compact
        JSON text.
        """
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, separators=(",", ":"), ensure_ascii=False)


class SettingsDocument(BaseModel):
    """The complete endpoint configuration document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    default_endpoint: str = Field(..., description="Base URL requests are forwarded to on no match")
    endpoints: List[EndpointConfig] = Field(..., description="Declared endpoints, in precedence order")

    @field_validator("default_endpoint")
    @classmethod
    def validate_default_endpoint(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("default_endpoint must be an absolute http(s) URL")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the JSON document shape."""
        return self.model_dump(mode="json")
