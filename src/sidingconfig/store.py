"""
Configuration store: pure transitions plus a stateful wrapper for the editor.

The module-level functions take a ``Configuration`` and return a new one;
inputs are never mutated. ``ConfigurationStore`` holds the current snapshot
for a session, turns transition errors into ``UpdateResult`` values, and
notifies registered callbacks of changes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from .models import NEW_MATERIAL_DEFAULTS, Configuration, MaterialRate, Settings, default_configuration

LOGGER = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], Awaitable[bool]]


class StoreError(ValueError):
    """Base class for rejected store transitions."""


class UnknownEntryError(StoreError, KeyError):
    """Raised when a transition names a material or story that does not exist."""

    def __str__(self) -> str:  # KeyError quotes its message otherwise
        return str(self.args[0]) if self.args else ""


class UnknownFieldError(StoreError):
    """Raised when a transition names a field the entry does not have."""


class InvalidValueError(StoreError):
    """Raised when a raw value fails to parse or violates a field constraint."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name
        self.reason = message


@dataclass(slots=True)
class ParseResult:
    ok: bool
    value: float | None = None
    error: str | None = None


def parse_number(raw: Any) -> ParseResult:
    """Parse free-text form input into a finite number.

    Empty strings, non-numeric text, NaN and infinities are rejected instead
    of being passed through to the configuration.
    """
    if isinstance(raw, bool):
        return ParseResult(ok=False, error="expected a number, got a boolean")
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = str(raw if raw is not None else "").strip()
        if not text:
            return ParseResult(ok=False, error="a value is required")
        try:
            number = float(text)
        except ValueError:
            return ParseResult(ok=False, error=f"'{text}' is not a number")
    if not math.isfinite(number):
        return ParseResult(ok=False, error="must be a finite number")
    return ParseResult(ok=True, value=number)


def _alias_map(model: type[BaseModel]) -> dict[str, str]:
    mapping = {}
    for name, info in model.model_fields.items():
        mapping[name] = name
        if info.alias:
            mapping[info.alias] = name
    return mapping


def _resolve_field(model: type[BaseModel], field_name: str) -> str:
    attr = _alias_map(model).get(field_name)
    if attr is None:
        raise UnknownFieldError(f"{model.__name__} has no field '{field_name}'")
    return attr


def _require_number(field_name: str, raw: Any) -> float:
    result = parse_number(raw)
    if not result.ok:
        raise InvalidValueError(field_name, result.error or "invalid number")
    return result.value


def _replace_field(entry: BaseModel, attr: str, field_name: str, value: Any) -> BaseModel:
    data = entry.model_dump()
    data[attr] = value
    try:
        return type(entry).model_validate(data)
    except ValidationError as exc:
        message = exc.errors()[0].get("msg", str(exc))
        raise InvalidValueError(field_name, message) from exc


def add_material(config: Configuration, name: str) -> Configuration:
    """Insert a material with the default rates; no-op for blank or existing names.

    The name is used exactly as entered.
    """
    if not name or not name.strip() or name in config.material_rates:
        return config
    rates = dict(config.material_rates)
    rates[name] = MaterialRate.model_validate(NEW_MATERIAL_DEFAULTS)
    return config.model_copy(update={"material_rates": rates})


def delete_material(config: Configuration, name: str) -> Configuration:
    if name not in config.material_rates:
        return config
    rates = {key: value for key, value in config.material_rates.items() if key != name}
    return config.model_copy(update={"material_rates": rates})


def update_material_rate(config: Configuration, name: str, field_name: str, raw: Any) -> Configuration:
    """Replace one field of a material.

    ``description`` is stored as text; every other field is parsed as a number.

    Raises:
        UnknownEntryError: ``name`` is not a configured material
        UnknownFieldError: ``field_name`` is not a material field
        InvalidValueError: the value does not parse or breaks a constraint
    """
    rate = config.material_rates.get(name)
    if rate is None:
        raise UnknownEntryError(f"Unknown material '{name}'")
    attr = _resolve_field(MaterialRate, field_name)
    if attr == "description":
        value = "" if raw is None else str(raw)
    else:
        value = _require_number(field_name, raw)
    rates = dict(config.material_rates)
    rates[name] = _replace_field(rate, attr, field_name, value)
    return config.model_copy(update={"material_rates": rates})


def update_height_multiplier(config: Configuration, story: str, field_name: str, raw: Any) -> Configuration:
    story = str(story)
    multiplier = config.height_multipliers.get(story)
    if multiplier is None:
        raise UnknownEntryError(f"Unknown story count '{story}'")
    attr = _resolve_field(type(multiplier), field_name)
    value = _require_number(field_name, raw)
    multipliers = dict(config.height_multipliers)
    multipliers[story] = _replace_field(multiplier, attr, field_name, value)
    return config.model_copy(update={"height_multipliers": multipliers})


def update_setting(config: Configuration, name: str, raw: Any) -> Configuration:
    attr = _resolve_field(Settings, name)
    value = _require_number(name, raw)
    settings = _replace_field(config.settings, attr, name, value)
    return config.model_copy(update={"settings": settings})


@dataclass(slots=True)
class UpdateResult:
    """Outcome of a store operation as seen by the UI."""

    ok: bool
    changed: bool = False
    message: str = ""


@dataclass
class ConfigurationStore:
    """Session state for the editor.

    Attributes:
        current: The configuration as edited so far
        baseline: Snapshot last loaded or published, used for ``is_modified``
    """

    current: Configuration = field(default_factory=default_configuration)
    baseline: Configuration | None = None
    _update_callbacks: list[Callable[[str, Any], None]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.baseline is None:
            self.baseline = self.current

    @property
    def is_modified(self) -> bool:
        return self.current != self.baseline

    def load(self, config: Configuration) -> None:
        """Replace the session configuration, e.g. after pulling it from the remote."""
        self.current = config
        self.baseline = config
        self._notify_update("loaded", {})

    def mark_published(self, snapshot: Configuration | None = None) -> None:
        """Record ``snapshot`` (default: the current configuration) as committed."""
        self.baseline = self.current if snapshot is None else snapshot
        self._notify_update("published", {})

    def add_material(self, name: str) -> UpdateResult:
        return self._apply("material_added", {"name": name}, add_material, name)

    async def delete_material(self, name: str, confirm: ConfirmCallback) -> UpdateResult:
        """Remove a material once ``confirm`` resolves to True.

        Args:
            name: Material to remove
            confirm: Async callable shown the prompt text; the UI passes a dialog
        """
        if name not in self.current.material_rates:
            return UpdateResult(ok=True, changed=False)
        if not await confirm(f"Are you sure you want to delete {name}?"):
            return UpdateResult(ok=True, changed=False, message="Deletion cancelled")
        return self._apply("material_deleted", {"name": name}, delete_material, name)

    def update_material_rate(self, name: str, field_name: str, raw: Any) -> UpdateResult:
        return self._apply(
            "value_changed",
            {"path": f"materialRates.{name}.{field_name}"},
            update_material_rate,
            name,
            field_name,
            raw,
        )

    def update_height_multiplier(self, story: str, field_name: str, raw: Any) -> UpdateResult:
        return self._apply(
            "value_changed",
            {"path": f"heightMultipliers.{story}.{field_name}"},
            update_height_multiplier,
            story,
            field_name,
            raw,
        )

    def update_setting(self, name: str, raw: Any) -> UpdateResult:
        return self._apply("value_changed", {"path": f"settings.{name}"}, update_setting, name, raw)

    def register_callback(self, callback: Callable[[str, Any], None]) -> None:
        if callback not in self._update_callbacks:
            self._update_callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[str, Any], None]) -> None:
        if callback in self._update_callbacks:
            self._update_callbacks.remove(callback)

    def _apply(self, event_type: str, data: dict[str, Any], transition, *args) -> UpdateResult:
        try:
            updated = transition(self.current, *args)
        except (InvalidValueError, UnknownFieldError) as exc:
            LOGGER.debug("Rejected %s: %s", event_type, exc)
            return UpdateResult(ok=False, message=str(exc))

        if updated is self.current:
            return UpdateResult(ok=True, changed=False)
        self.current = updated
        self._notify_update(event_type, data)
        return UpdateResult(ok=True, changed=True)

    def _notify_update(self, event_type: str, data: Any) -> None:
        for callback in list(self._update_callbacks):
            try:
                callback(event_type, data)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Store callback failed for %s", event_type)
