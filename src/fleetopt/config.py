"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETOPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Fleet Route Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level configured by the API app.")
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted run outputs.")

    # Scalarization constants used to rank assignments, routes and solutions.
    cost_pickup_distance_weight: float = Field(default=0.1, ge=0.0)
    cost_time_window_weight: float = Field(default=100.0, ge=0.0)
    cost_utilization_weight: float = Field(default=50.0, ge=0.0)
    cost_route_distance_weight: float = Field(default=0.5, ge=0.0)
    cost_route_duration_weight: float = Field(default=0.1, ge=0.0)
    cost_violation_penalty: float = Field(default=1000.0, ge=0.0)

    alns_iterations: int = Field(default=100, ge=0)
    alns_destroy_fraction: float = Field(default=0.1, ge=0.0, le=1.0)
    solver_time_limit_seconds: int = Field(
        default=30,
        ge=0,
        description="Wall-clock budget for the improvement loop (0 disables the limit).",
    )
    solver_random_seed: Optional[int] = Field(default=None, description="Seed for the destroy step.")

    service_time_minutes: float = Field(default=30.0, ge=0.0)
    average_speed_kmh: float = Field(default=50.0, gt=0.0)
    max_driving_hours: float = Field(default=9.0, gt=0.0)

    eta_history_size: int = Field(default=100, ge=1)
    eta_key_precision: int = Field(default=4, ge=0, description="Decimals kept when keying route history.")

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> str:
        return str(value).strip().upper() or "INFO"

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
