"""Pydantic models for the calculator configuration.

Field aliases match the camelCase names the calculator reads from
``config.js``; Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        allow_inf_nan=False,
        extra="forbid",
    )


class MaterialRate(_ConfigModel):
    """Production rate and price for one siding material."""

    buildings_per_day: float = Field(alias="buildingsPerDay", gt=0)
    price_per_building: float = Field(alias="pricePerBuilding", ge=0)
    description: str = ""


class HeightMultiplier(_ConfigModel):
    """Time and price adjustment for a building of a given story count."""

    time_multiplier: float = Field(alias="timeMultiplier", gt=0)
    price_multiplier: float = Field(alias="priceMultiplier", gt=0)


class Settings(_ConfigModel):
    baseline_revenue: float = Field(alias="baselineRevenue")
    min_buildings_per_day: float = Field(alias="minBuildingsPerDay")
    rounding_precision: float = Field(alias="roundingPrecision")
    scale_multiplier_precision: float = Field(alias="scaleMultiplierPrecision")


class Configuration(_ConfigModel):
    """Aggregate published as ``calculatorConfig``."""

    material_rates: dict[str, MaterialRate] = Field(alias="materialRates", default_factory=dict)
    height_multipliers: dict[str, HeightMultiplier] = Field(alias="heightMultipliers", default_factory=dict)
    settings: Settings

    def to_json_dict(self) -> dict:
        """Return the JSON-ready mapping using the calculator's field names.

        Whole-number floats are written as integers, so a rate of 6 is
        published as ``6`` and not ``6.0``.
        """
        return _compact_numbers(self.model_dump(mode="json", by_alias=True))


def _compact_numbers(value):
    if isinstance(value, dict):
        return {key: _compact_numbers(item) for key, item in value.items()}
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


NEW_MATERIAL_DEFAULTS = {
    "buildingsPerDay": 4,
    "pricePerBuilding": 500,
    "description": "New material type",
}


def default_configuration() -> Configuration:
    """Build the configuration the editor starts with."""
    return Configuration.model_validate(
        {
            "materialRates": {
                "vinyl": {
                    "buildingsPerDay": 6,
                    "pricePerBuilding": 450,
                    "description": "Standard vinyl siding",
                },
                "hardie": {
                    "buildingsPerDay": 5,
                    "pricePerBuilding": 565,
                    "description": "HardiePlank fiber cement siding",
                },
            },
            "heightMultipliers": {
                "2": {"timeMultiplier": 1.0, "priceMultiplier": 1.0},
                "3": {"timeMultiplier": 0.6, "priceMultiplier": 1.67},
                "4": {"timeMultiplier": 0.5, "priceMultiplier": 2.0},
            },
            "settings": {
                "baselineRevenue": 2250,
                "minBuildingsPerDay": 1,
                "roundingPrecision": 100,
                "scaleMultiplierPrecision": 2,
            },
        }
    )
