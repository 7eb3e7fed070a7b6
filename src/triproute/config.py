"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Trip Route Optimizer API"
    api_prefix: str = "/api"
    routes_api_url: str = Field(
        default="https://routes.googleapis.com/distanceMatrix/v2:computeRouteMatrix",
        description="Endpoint of the route matrix service.",
    )
    routes_api_key: Optional[str] = Field(
        default=None,
        description="API key sent with every route matrix request.",
    )
    routes_timeout_seconds: float = Field(default=30.0, gt=0.0)
    routes_max_requests_per_window: int = Field(
        default=1,
        ge=1,
        description="Outbound route matrix calls allowed to start within one window.",
    )
    routes_window_seconds: float = Field(default=1.0, gt=0.0)
    routes_max_elements_per_request: int = Field(
        default=49,
        ge=1,
        description="Upper bound for origins x destinations in a single matrix request.",
    )
    reject_unparsable_durations: bool = Field(
        default=False,
        description="Fail the matrix request instead of treating an unreadable duration as 0 seconds.",
    )
    brute_force_threshold: int = Field(
        default=7,
        ge=1,
        description="Largest number of activities for which every spot permutation is evaluated.",
    )
    default_travel_mode: Literal["WALK", "DRIVE", "TRANSIT", "BICYCLE"] = "DRIVE"
    suggestion_timeout_seconds: Optional[float] = Field(
        default=60.0,
        gt=0.0,
        description="Deadline for a whole suggestion run, rate limiter waits included.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
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
