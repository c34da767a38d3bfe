"""Reading and writing the ``config.js`` module the calculator imports."""

from __future__ import annotations

import base64
import binascii
import json

from pydantic import ValidationError

from .models import Configuration

MODULE_PREFIX = "const calculatorConfig = "
MODULE_SUFFIX = ";\n\nexport default calculatorConfig;"


class ArtifactFormatError(ValueError):
    """Raised when remote content is not a calculator config module."""


def render_module(config: Configuration) -> str:
    """Serialize ``config`` into the module text committed to the repository."""
    body = json.dumps(config.to_json_dict(), indent=2, ensure_ascii=False)
    return f"{MODULE_PREFIX}{body}{MODULE_SUFFIX}"


def parse_module(text: str) -> Configuration:
    """Unwrap module text produced by ``render_module`` and validate it."""
    stripped = text.strip()
    if not stripped.startswith(MODULE_PREFIX):
        raise ArtifactFormatError("Module does not start with 'const calculatorConfig = '")
    if not stripped.endswith(MODULE_SUFFIX):
        raise ArtifactFormatError("Module does not end with the calculatorConfig export")

    body = stripped[len(MODULE_PREFIX) : -len(MODULE_SUFFIX)]
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ArtifactFormatError(f"Configuration body is not valid JSON: {exc}") from exc
    try:
        return Configuration.model_validate(data)
    except ValidationError as exc:
        raise ArtifactFormatError(f"Configuration body failed validation: {exc}") from exc


def encode_content(text: str) -> str:
    """Base64-encode UTF-8 text for the contents API ``content`` field."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    # GitHub wraps returned base64 at 60 columns
    compact = "".join(encoded.split())
    try:
        return base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ArtifactFormatError(f"Content is not base64-encoded UTF-8: {exc}") from exc
