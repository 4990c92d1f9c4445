from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings.

    Every tolerance band below was tuned by hand against real coached weeks.
    The defaults are the tuned values; override them through the environment
    (``COMPLIANCE_<FIELD>``) or a ``.env`` file rather than editing code.
    """

    log_level: str = "INFO"

    # Interval detection
    warmup_exclusion_sec: float = Field(default=300.0, description="Samples before this elapsed time are ignored")
    entry_margin_bpm: float = Field(default=5.0, description="Entry threshold sits this far below the target zone minimum")
    exit_margin_bpm: float = Field(default=10.0, description="Exit threshold sits this far below the target zone minimum")
    entry_dwell_samples: int = Field(default=10, ge=1)
    exit_dwell_samples: int = Field(default=10, ge=1)
    min_interval_fraction: float = Field(default=0.5, gt=0.0, le=1.0)

    # Activity matching
    match_type_bonus: float = 10.0
    match_duration_bonus: float = 5.0
    match_duration_band: tuple[float, float] = (0.7, 1.3)
    match_max_length_bonus_hours: float = 2.0

    # Compliance scoring
    duration_full_band: tuple[float, float] = (0.8, 1.2)
    duration_partial_band: tuple[float, float] = (0.6, 1.4)
    duration_floor_ratio: float = 0.4
    interval_duration_band: tuple[float, float] = (0.8, 1.2)
    bpm_range_tolerance: float = 10.0
    adjacent_zone_margin_bpm: float = 20.0
    default_interval_zone: int = Field(default=3, ge=1, le=5)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COMPLIANCE_",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid COMPLIANCE_LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("match_duration_band", "duration_full_band", "duration_partial_band", "interval_duration_band")
    @classmethod
    def validate_band(cls, value: tuple[float, float]) -> tuple[float, float]:
        """Validate that a ratio band is ordered low to high."""
        low, high = value
        if low > high:
            raise ValueError(f"Band lower bound {low} exceeds upper bound {high}")
        return value

    @model_validator(mode="after")
    def validate_hysteresis(self) -> "Settings":
        """Exit threshold must not sit above the entry threshold."""
        if self.exit_margin_bpm < self.entry_margin_bpm:
            raise ValueError("exit_margin_bpm must be >= entry_margin_bpm for the hysteresis band to hold")
        return self


settings = Settings()
