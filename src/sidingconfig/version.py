"""Installed package version."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

_FALLBACK_VERSION = "unknown"

try:
    __version__ = version("sidingconfig")
except PackageNotFoundError:
    __version__ = _FALLBACK_VERSION
