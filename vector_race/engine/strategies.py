from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from vector_race.config import get_config

from .data_models import AgentState, CellType, Coordinate, Track
from .landing_regions import LandingRegion, LandingRegionsProcessor, group_path_into_regions
from .motion import (
    apply_move,
    bounded_candidates,
    check_crashed,
    distance_from_borders,
    manhattan_distance,
    theoretical_velocity,
    unbounded_candidates,
)

logger = logging.getLogger(__name__)

DEFAULT_CELL_VALUES: Dict[CellType, float] = {
    CellType.WALL: 1.0,
    CellType.TRACK: 10.0,
    CellType.START: 1.0,
    CellType.FINISH: 20.0,
}

MIN_DRAW_WEIGHT = 1e-6


def _cell_values_from_config(raw: object) -> Dict[CellType, float]:
    values = dict(DEFAULT_CELL_VALUES)
    if isinstance(raw, Mapping):
        for cell_type in CellType:
            entry = raw.get(cell_type.name.lower())
            if entry is not None:
                values[cell_type] = float(entry)
    return values


@dataclass(frozen=True)
class StrategyWeights:
    """Tunable scoring constants for the principal-point strategies."""

    cell_type_weight: float = 0.6
    border_weight: float = 0.3
    velocity_weight: float = 0.1
    ideal_velocity: float = 2.0
    sigma: float = 1.0
    # WeightedRandom multiplies the velocity term by it; Random scales the total.
    stay_in_place_penalty: float = -10.0
    wall_border_value: float = 0.5
    cell_values: Mapping[CellType, float] = field(default_factory=lambda: dict(DEFAULT_CELL_VALUES))

    @classmethod
    def from_config(cls, section: str, **defaults: float) -> "StrategyWeights":
        """Reads ``strategies.<section>`` from the balance config; ``defaults`` fill the gaps."""
        base = cls(**defaults)
        prefix = f"strategies.{section}"
        loaded = {
            name: float(get_config(f"{prefix}.{name}", getattr(base, name)))
            for name in (
                "cell_type_weight",
                "border_weight",
                "velocity_weight",
                "ideal_velocity",
                "sigma",
                "stay_in_place_penalty",
                "wall_border_value",
            )
        }
        cell_values = _cell_values_from_config(get_config(f"{prefix}.cell_values"))
        return replace(base, cell_values=cell_values, **loaded)


@dataclass(frozen=True)
class LandingRegionWeights:
    distance_weight: float = 1.0
    velocity_weight: float = 0.5
    lookahead_weight: float = 0.25
    stay_in_place_penalty: float = -1.0
    overspeed_penalty: float = 1.0

    @classmethod
    def from_config(cls, section: str = "landing_regions") -> "LandingRegionWeights":
        base = cls()
        return cls(
            **{
                name: float(get_config(f"strategies.{section}.{name}", getattr(base, name)))
                for name in base.__dataclass_fields__
            }
        )


@dataclass(frozen=True)
class WeightedMove:
    coordinate: Coordinate
    weight: float


def best_move(moves: Sequence[WeightedMove]) -> WeightedMove:
    """Highest weight wins; equal weights fall back to the lowest row, then column."""
    return min(moves, key=lambda move: (-move.weight, move.coordinate.row, move.coordinate.column))


class MoveStrategy(ABC):
    """Picks and applies one move per turn for a single agent."""

    name = "strategy"

    def __init__(self, track: Track) -> None:
        self.track = track

    @abstractmethod
    def apply_strategy(self, agent: AgentState) -> None:
        ...

    @abstractmethod
    def get_available_moves(self, agent: AgentState) -> List[Coordinate]:
        ...

    def check_has_crashed(self, agent: AgentState) -> bool:
        return check_crashed(agent, self.track)

    def _crash_without_moving(self, agent: AgentState) -> None:
        logger.info("agent %s has no legal move from %s, marking crashed", agent.agent_id, agent.position)
        agent.mark_crashed()

    def __str__(self) -> str:
        return self.name


class WeightedRandomStrategy(MoveStrategy):
    """Greedy scoring on cell type, distance from walls and a Gaussian velocity preference."""

    name = "WeightedRandomStrategy"

    def __init__(self, track: Track, weights: Optional[StrategyWeights] = None) -> None:
        super().__init__(track)
        self.weights = weights or StrategyWeights.from_config("weighted_random")

    def apply_strategy(self, agent: AgentState) -> None:
        available = self.get_available_moves(agent)
        if not available:
            self._crash_without_moving(agent)
            return
        chosen = self.select_move(self.evaluate_moves(available, agent))
        apply_move(agent, chosen.coordinate)
        self.check_has_crashed(agent)

    def get_available_moves(self, agent: AgentState) -> List[Coordinate]:
        return bounded_candidates(agent, self.track)

    def select_move(self, weighted_moves: Sequence[WeightedMove]) -> WeightedMove:
        return best_move(weighted_moves)

    def evaluate_moves(self, moves: Sequence[Coordinate], agent: AgentState) -> List[WeightedMove]:
        return [WeightedMove(move, self.calculate_move_weight(agent, move)) for move in moves]

    def calculate_move_weight(self, agent: AgentState, move: Coordinate) -> float:
        cell_type = self.track.cell_type_at(move)
        cell_value = self.weights.cell_values[cell_type]
        border_value = self._border_value(move, cell_type)
        velocity = theoretical_velocity(agent.position, move)
        return (
            cell_value * self.weights.cell_type_weight
            + border_value * self.weights.border_weight
            + self.velocity_value(velocity) * self.weights.velocity_weight
        )

    def velocity_value(self, velocity: float) -> float:
        value = self._gaussian(velocity)
        if velocity == 0.0:
            return value * self.weights.stay_in_place_penalty
        return value

    def _gaussian(self, velocity: float) -> float:
        sigma = self.weights.sigma
        return math.exp(-((velocity - self.weights.ideal_velocity) ** 2) / (2 * sigma * sigma))

    def _border_value(self, move: Coordinate, cell_type: CellType) -> float:
        if cell_type is CellType.WALL:
            return self.weights.wall_border_value
        return math.sqrt(distance_from_borders(self.track, move))


class RandomStrategy(WeightedRandomStrategy):
    """
    Draws the destination at random, proportionally to its score.

    Scores follow the weighted strategy except that staying in place scales
    the whole score by ``stay_in_place_penalty`` instead of the velocity term.
    """

    name = "RandomStrategy"

    def __init__(
        self,
        track: Track,
        weights: Optional[StrategyWeights] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(track, weights or StrategyWeights.from_config("random", stay_in_place_penalty=0.5))
        self.rng = np.random.default_rng(seed)

    def calculate_move_weight(self, agent: AgentState, move: Coordinate) -> float:
        score = super().calculate_move_weight(agent, move)
        if move == agent.position:
            score *= self.weights.stay_in_place_penalty
        return score

    def velocity_value(self, velocity: float) -> float:
        return self._gaussian(velocity)

    def select_move(self, weighted_moves: Sequence[WeightedMove]) -> WeightedMove:
        weights = np.clip([move.weight for move in weighted_moves], MIN_DRAW_WEIGHT, None)
        probabilities = weights / weights.sum()
        index = int(self.rng.choice(len(weighted_moves), p=probabilities))
        return weighted_moves[index]


class LandingRegionsStrategy(MoveStrategy):
    """
    Steers through an ordered list of landing regions toward the finish line.

    Each region is a target until the agent enters it; the speed allowed near a
    region grows with the square root of its larger side, and the finish
    region is uncapped.
    """

    name = "LandingRegionsStrategy"

    def __init__(
        self,
        track: Track,
        regions: Optional[Sequence[LandingRegion]] = None,
        weights: Optional[LandingRegionWeights] = None,
        processor: Optional[LandingRegionsProcessor] = None,
    ) -> None:
        super().__init__(track)
        if regions is None:
            path = (processor or LandingRegionsProcessor()).process_landing_regions(track)
            regions = group_path_into_regions(path, track)
        self.regions: List[LandingRegion] = list(regions)
        self.visited: List[bool] = [False] * len(self.regions)
        self.weights = weights or LandingRegionWeights.from_config()

    def apply_strategy(self, agent: AgentState) -> None:
        self.update_visited(agent.position)
        candidates = [move for move in self.get_available_moves(agent) if self.track.is_within_boundaries(move)]
        if not candidates:
            self._crash_without_moving(agent)
            return

        # Walls score lowest but stay eligible; driving onto one crashes the agent.
        target_index = self.target_index()
        weighted = [WeightedMove(move, self.calculate_move_weight(agent, move, target_index)) for move in candidates]
        chosen = best_move(weighted)
        apply_move(agent, chosen.coordinate)
        self.check_has_crashed(agent)
        self.update_visited(agent.position)

    def get_available_moves(self, agent: AgentState) -> List[Coordinate]:
        return unbounded_candidates(agent)

    def check_has_crashed(self, agent: AgentState) -> bool:
        if not self.track.is_within_boundaries(agent.position):
            agent.mark_crashed()
            return True
        return super().check_has_crashed(agent)

    def update_visited(self, position: Coordinate) -> None:
        """Marks the region holding ``position`` and every region before it as visited."""
        for index in range(len(self.regions) - 1, -1, -1):
            if not self.visited[index] and self.regions[index].contains(position):
                for earlier in range(index + 1):
                    self.visited[earlier] = True
                logger.debug("region %d reached at %s", index, position)
                return

    def target_index(self) -> Optional[int]:
        for index, visited in enumerate(self.visited):
            if not visited:
                return index
        return len(self.regions) - 1 if self.regions else None

    def next_unvisited_after(self, index: Optional[int]) -> Optional[int]:
        if index is None:
            return None
        for candidate in range(index + 1, len(self.regions)):
            if not self.visited[candidate]:
                return candidate
        return None

    def max_velocity(self, region: LandingRegion) -> float:
        if region.is_finish_region(self.track):
            return math.inf
        return math.sqrt(max(region.width, region.height))

    def calculate_move_weight(self, agent: AgentState, move: Coordinate, target_index: Optional[int]) -> float:
        if not self._is_drivable(move):
            return -math.inf
        if self.track.cell_type_at(move) is CellType.FINISH:
            return math.inf
        if target_index is None:
            return 0.0

        target = self.regions[target_index]
        weight = self.weights.distance_weight / (1.0 + average_distance(move, target))
        velocity = theoretical_velocity(agent.position, move)
        weight += self.weights.velocity_weight * self._velocity_value(velocity, self.max_velocity(target))

        lookahead = self.next_unvisited_after(target_index)
        if lookahead is not None:
            weight += self.weights.lookahead_weight / (1.0 + average_distance(move, self.regions[lookahead]))
        return weight

    def _velocity_value(self, velocity: float, cap: float) -> float:
        if velocity == 0.0:
            return self.weights.stay_in_place_penalty
        if math.isinf(cap):
            return 1.0
        if velocity <= cap:
            return velocity / cap
        return -self.weights.overspeed_penalty * (velocity - cap)

    def _is_drivable(self, move: Coordinate) -> bool:
        return self.track.is_within_boundaries(move) and self.track.cell_type_at(move) is not CellType.WALL


def average_distance(move: Coordinate, region: LandingRegion) -> float:
    if not region.cells:
        return math.inf
    return sum(manhattan_distance(move, cell) for cell in region.cells) / len(region.cells)


class StrategyKind(Enum):
    RANDOM = "random"
    WEIGHTED_RANDOM = "weighted_random"
    LANDING_REGIONS = "landing_regions"

    @classmethod
    def from_str(cls, value: str) -> "StrategyKind":
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown strategy: {value}") from exc


def select_strategy_kind(agent_index: int) -> StrategyKind:
    if agent_index % 2 == 0:
        return StrategyKind.WEIGHTED_RANDOM
    return StrategyKind.LANDING_REGIONS


def create_strategy(
    kind: StrategyKind,
    track: Track,
    *,
    seed: Optional[int] = None,
    regions: Optional[Sequence[LandingRegion]] = None,
) -> MoveStrategy:
    """Builds a fresh strategy; landing-region state is never shared between agents."""
    if kind is StrategyKind.RANDOM:
        return RandomStrategy(track, seed=seed)
    if kind is StrategyKind.WEIGHTED_RANDOM:
        return WeightedRandomStrategy(track)
    if kind is StrategyKind.LANDING_REGIONS:
        return LandingRegionsStrategy(track, regions=regions)
    raise ValueError(f"Unsupported strategy kind: {kind}")
