"""
Race engine package for grid-based vector racing.

The package is split into data models, motion rules, landing-region
analysis, move strategies and loading utilities. The race loop composes
these pieces to drive rounds until an agent finishes or all crash.
"""

from .data_models import (  # noqa: F401
    AgentState,
    Cell,
    CellType,
    Coordinate,
    InvalidTrackError,
    RaceDirection,
    Track,
)
from .landing_regions import (  # noqa: F401
    LandingRegion,
    LandingRegionsDetector,
    LandingRegionsElaborator,
    LandingRegionsProcessor,
    Segment,
    group_path_into_regions,
)
from .strategies import (  # noqa: F401
    LandingRegionsStrategy,
    LandingRegionWeights,
    MoveStrategy,
    RandomStrategy,
    StrategyKind,
    StrategyWeights,
    WeightedMove,
    WeightedRandomStrategy,
    create_strategy,
    select_strategy_kind,
)
from .telemetry import TelemetryAgentFrame, TelemetryCollector, TelemetryFrame  # noqa: F401
from .track_loader import InvalidTrackFileError, load_json_track  # noqa: F401
from .race_loop import RaceLoop, RaceResult, RoundSnapshot  # noqa: F401

__all__ = [
    "AgentState",
    "Cell",
    "CellType",
    "Coordinate",
    "InvalidTrackError",
    "RaceDirection",
    "Track",
    "LandingRegion",
    "LandingRegionsDetector",
    "LandingRegionsElaborator",
    "LandingRegionsProcessor",
    "Segment",
    "group_path_into_regions",
    "LandingRegionsStrategy",
    "LandingRegionWeights",
    "MoveStrategy",
    "RandomStrategy",
    "StrategyKind",
    "StrategyWeights",
    "WeightedMove",
    "WeightedRandomStrategy",
    "create_strategy",
    "select_strategy_kind",
    "TelemetryAgentFrame",
    "TelemetryCollector",
    "TelemetryFrame",
    "InvalidTrackFileError",
    "load_json_track",
    "RaceLoop",
    "RaceResult",
    "RoundSnapshot",
]
