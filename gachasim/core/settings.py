"""
Settings module for the gacha simulator.

Defines the tunable parameters of the engine and loads them from an optional
JSON file. Anything not present in the file keeps its default.
"""

import json
from pathlib import Path
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field, NonNegativeInt, field_validator

from gachasim.core.constants import (
    ANIMATION_MAX_MS,
    ANIMATION_MIN_MS,
    DEBUG_STORAGE_KEY,
    DEFAULT_POOL_TIMEOUT,
    DEFAULT_POOL_URL,
    DEFAULT_RARITY_WEIGHTS,
    MAX_ROLL_COUNT,
    MIN_ROLL_COUNT,
    PREVIEW_INTERVAL,
    SAVE_STORAGE_KEY,
    Rarity,
)
from gachasim.core.errors import ConfigurationError


class GachaSettings(BaseModel):
    """Tunable parameters of the gacha engine."""

    pool_url: str = Field(
        default=DEFAULT_POOL_URL,
        description="Endpoint returning the list of drawable items.",
    )
    pool_timeout: float = Field(
        default=DEFAULT_POOL_TIMEOUT,
        gt=0,
        description="Total timeout, in seconds, of the pool request.",
    )
    pool_file: Path | None = Field(
        default=None,
        description="Local JSON file used instead of the remote pool when set.",
    )
    profile_path: Path = Field(
        default=Path("gacha_profile.json"),
        description="File backing the durable key-value store of this profile.",
    )
    save_key: str = Field(
        default=SAVE_STORAGE_KEY,
        min_length=1,
        description="Storage key of the inventory and statistics record.",
    )
    debug_key: str = Field(
        default=DEBUG_STORAGE_KEY,
        min_length=1,
        description="Storage key of the debug flag.",
    )
    rarity_weights: dict[Rarity, NonNegativeInt] = Field(
        default_factory=lambda: dict(DEFAULT_RARITY_WEIGHTS),
        description="Drop weight of each rarity tier.",
    )
    animation_min_ms: NonNegativeInt = Field(
        default=ANIMATION_MIN_MS,
        description="Shortest roll animation, in milliseconds.",
    )
    animation_max_ms: NonNegativeInt = Field(
        default=ANIMATION_MAX_MS,
        description="Longest roll animation, in milliseconds.",
    )
    preview_interval: float = Field(
        default=PREVIEW_INTERVAL,
        gt=0,
        description="Seconds between two cosmetic preview frames.",
    )
    min_roll_count: int = Field(
        default=MIN_ROLL_COUNT,
        ge=1,
        description="Lower bound of the number of draws in a roll.",
    )
    max_roll_count: int = Field(
        default=MAX_ROLL_COUNT,
        ge=1,
        description="Upper bound of the number of draws in a roll.",
    )
    default_roll_count: int = Field(
        default=1,
        ge=1,
        description="Number of draws used when a roll does not specify one.",
    )
    allow_skip: bool = Field(
        default=False,
        description=(
            "Whether a click during the animation cuts it short. Only reachable "
            "through RollOrchestrator.click; the console waits for each roll."
        ),
    )
    debug_override: bool | None = Field(
        default=None,
        description="In-memory debug flag used when the stored one is not set.",
    )

    @field_validator("rarity_weights", mode="before")
    @classmethod
    def _parse_rarity_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        parsed: dict[Any, Any] = {}
        for key, weight in value.items():
            rarity = Rarity.parse(key)
            if rarity is None:
                raise ValueError(f"Unknown rarity '{key}' in weight table")
            parsed[rarity] = weight
        return parsed

    def model_post_init(self, _: Any) -> None:
        """Validates cross-field constraints after model initialization."""
        if self.animation_min_ms > self.animation_max_ms:
            raise ValueError("animation_min_ms must not exceed animation_max_ms")
        if self.min_roll_count > self.max_roll_count:
            raise ValueError("min_roll_count must not exceed max_roll_count")


def load_settings(path: Path | None = None, **overrides: Any) -> GachaSettings:
    """
    Loads the settings from a JSON object file.

    Args:
        path (Path | None):
            The settings file. None, or a missing file, yields the defaults.
        **overrides (Any):
            Values taking precedence over the file (e.g. command-line flags).
            None values are ignored.

    Returns:
        GachaSettings:
            The validated settings.

    Raises:
        ConfigurationError:
            If the file is not valid JSON, is not an object, or holds invalid
            values.

    """
    data: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            log_warning(
                f"Settings file {path} not found; using defaults.",
                {"path": str(path)},
            )
        else:
            try:
                with open(path, encoding="utf-8") as f:
                    payload = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(
                    f"Settings file {path} could not be read: {e}",
                    {"path": str(path)},
                ) from e
            if not isinstance(payload, dict):
                raise ConfigurationError(
                    f"Expected an object in {path}, got {type(payload).__name__}",
                    {"path": str(path)},
                )
            data.update(payload)
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return GachaSettings(**data)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid settings: {e}", {"path": str(path) if path else None}
        ) from e
