"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Correlation analysis
    min_samples: int = 5
    min_samples_floor: int = 5  # requests asking for fewer are raised to this
    min_samples_ceiling: int = 50
    insight_threshold: float = 0.3  # minimum |r| to report or suggest an input
    insight_limit: int = 0  # 0 = no cap on ranked insights

    # Goal tolerances for measured (non-scale) metrics
    tds_tolerance: float = 0.02
    extraction_yield_tolerance: float = 0.5

    # Logging
    log_level: str = "INFO"

    def goal_tolerances(self) -> dict[str, float]:
        return {
            "tds": self.tds_tolerance,
            "extraction_yield": self.extraction_yield_tolerance,
        }

    def clamp_min_samples(self, requested: int | None) -> int:
        value = requested if requested is not None else self.min_samples
        return max(self.min_samples_floor, min(self.min_samples_ceiling, value))


settings = Settings()
