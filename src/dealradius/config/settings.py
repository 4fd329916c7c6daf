# src/dealradius/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/dealradius/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `DEALRADIUS_LOG_LEVEL`, `DEALRADIUS_CATALOG_PATH`)
- an external YAML file via `DEALRADIUS_CONFIG_PATH`

Design rule:
- Radius limits, circle resolution and settle animation knobs live in YAML, not in the controller.
"""

from __future__ import annotations

import math
import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from dealradius.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `dealradius.config`."""
    text = resources.files("dealradius.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "DealRadius"
    log_level: str = "INFO"


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/deals.json"


class RadiusSettings(BaseModel):
    default_miles: int = Field(10, ge=1, le=50)
    min_miles: int = Field(1, ge=1, le=50)
    max_miles: int = Field(50, ge=1, le=50)

    @model_validator(mode="after")
    def _validate_range(self) -> "RadiusSettings":
        if self.min_miles > self.max_miles:
            raise ValueError("radius.min_miles must be <= radius.max_miles")
        if not self.min_miles <= self.default_miles <= self.max_miles:
            raise ValueError("radius.default_miles must lie within [min_miles, max_miles]")
        return self


class CircleSettings(BaseModel):
    points: int = Field(64, ge=3, le=1024)


class SettleSettings(BaseModel):
    padding_factor: float = Field(1.2, ge=1)
    duration_ms: int = Field(800, ge=0)
    initial_duration_ms: int = Field(1000, ge=0)
    padding_px: int = Field(40, ge=0)
    max_zoom: float = Field(15, ge=0, le=24)


class LayerPaint(BaseModel):
    fill_opacity: float = Field(0.1, ge=0, le=1)
    outline_width: float = Field(2, ge=0)
    outline_opacity: float = Field(0.5, ge=0, le=1)
    edge_width: float = Field(20, ge=0)
    edge_opacity: float = Field(0.0, ge=0, le=1)


def _drag_paint() -> LayerPaint:
    return LayerPaint(
        fill_opacity=0.15,
        outline_width=3,
        outline_opacity=0.8,
        edge_width=32,
        edge_opacity=0.2,
    )


class StyleSettings(BaseModel):
    rest: LayerPaint = Field(default_factory=LayerPaint)
    drag: LayerPaint = Field(default_factory=_drag_paint)
    competitor_account_prefix: str = "competitor-"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    radius: RadiusSettings = Field(default_factory=RadiusSettings)  # type: ignore
    circle: CircleSettings = Field(default_factory=CircleSettings)  # type: ignore
    settle: SettleSettings = Field(default_factory=SettleSettings)  # type: ignore
    style: StyleSettings = Field(default_factory=StyleSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("DEALRADIUS_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("DEALRADIUS_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    default_radius = os.getenv("DEALRADIUS_DEFAULT_RADIUS_MILES")
    if default_radius:
        # Whole miles, half up; range checks are left to RadiusSettings.
        data.setdefault("radius", {})["default_miles"] = math.floor(float(default_radius) + 0.5)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("DEALRADIUS_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
