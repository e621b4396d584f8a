"""Season pipeline orchestration."""

from .season import SeasonConfig, SeasonPipeline

__all__ = ["SeasonConfig", "SeasonPipeline"]
