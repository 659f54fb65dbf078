from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from vector_race.config import get_config

from .data_models import AgentState, Coordinate, Track
from .landing_regions import LandingRegion, LandingRegionsProcessor, group_path_into_regions
from .motion import is_winner
from .strategies import StrategyKind, create_strategy, select_strategy_kind
from .telemetry import TelemetryAgentFrame, TelemetryCollector, TelemetryFrame

logger = logging.getLogger(__name__)

MAX_AGENTS = int(get_config("race.max_agents", 10))
DEFAULT_SEED = int(get_config("race.seed", 42))
# Bounds races where an agent can only stay in place and never crashes
DEFAULT_MAX_ROUNDS = int(get_config("race.max_rounds", 1000))


@dataclass
class AgentSnapshot:
    agent_id: int
    position: Coordinate
    velocity: float
    has_crashed: bool


@dataclass
class RoundSnapshot:
    round_index: int
    agents: List[AgentSnapshot] = field(default_factory=list)
    winner_id: Optional[int] = None


@dataclass
class RaceResult:
    winner_id: Optional[int]
    rounds: int
    snapshots: List[RoundSnapshot] = field(default_factory=list)

    @property
    def all_crashed(self) -> bool:
        return self.winner_id is None and bool(self.snapshots) and all(
            agent.has_crashed for agent in self.snapshots[-1].agents
        )


class RaceLoop:
    """
    Turn-synchronous race driver.

    Agents move strictly in array order; each one completes its whole
    decide/apply/crash-check sequence before the next starts.
    """

    def __init__(
        self,
        track: Track,
        strategy_kinds: Optional[Sequence[StrategyKind]] = None,
        *,
        number_of_players: Optional[int] = None,
        seed: int = DEFAULT_SEED,
        telemetry: Optional[TelemetryCollector] = None,
    ) -> None:
        self.track = track
        self.telemetry = telemetry
        self.round_index = 0
        self.winner: Optional[AgentState] = None

        total = number_of_players if number_of_players is not None else track.number_of_players
        if total <= 0:
            raise ValueError("A race needs at least one agent")
        if total > MAX_AGENTS:
            raise ValueError(f"At most {MAX_AGENTS} agents can race, got {total}")

        self._rng = random.Random(seed)
        self._regions: Optional[List[LandingRegion]] = None
        self._agents: List[AgentState] = []

        agent_ids = self._rng.sample(range(MAX_AGENTS), total)
        start_line = track.start_coordinates()
        for idx, agent_id in enumerate(agent_ids):
            # Cycle through the start line when agents outnumber START cells
            agent = AgentState(agent_id=agent_id, position=start_line[idx % len(start_line)])
            if strategy_kinds:
                kind = strategy_kinds[idx % len(strategy_kinds)]
            else:
                kind = select_strategy_kind(idx)
            agent.strategy = create_strategy(
                kind,
                track,
                seed=seed + idx,
                regions=self._landing_regions() if kind is StrategyKind.LANDING_REGIONS else None,
            )
            self._agents.append(agent)

        logger.info(
            "race initialised with %d agents: %s",
            total,
            ", ".join(f"{agent.agent_id}={agent.strategy}" for agent in self._agents),
        )

    @property
    def agents(self) -> Sequence[AgentState]:
        return self._agents

    @staticmethod
    def has_crashed(agent: AgentState) -> bool:
        return agent.has_crashed

    @staticmethod
    def get_position(agent: AgentState) -> Coordinate:
        return agent.position

    def all_crashed(self) -> bool:
        return all(agent.has_crashed for agent in self._agents)

    def is_finished(self) -> bool:
        return self.winner is not None or self.all_crashed()

    def play_round(self) -> RoundSnapshot:
        self.round_index += 1
        for agent in self._agents:
            if agent.has_crashed:
                continue
            agent.strategy.apply_strategy(agent)

        # First agent in array order on the finish line wins; ties are not shared.
        for agent in self._agents:
            if not agent.has_crashed and is_winner(agent, self.track):
                self.winner = agent
                logger.info("agent %s wins in round %d", agent.agent_id, self.round_index)
                break

        if self.telemetry is not None:
            self._record_telemetry()
        return self._snapshot()

    def run(
        self,
        on_round: Optional[Callable[[RoundSnapshot], None]] = None,
        max_rounds: Optional[int] = DEFAULT_MAX_ROUNDS,
    ) -> RaceResult:
        """Plays rounds until a winner, a full crash-out or ``max_rounds``; ``None`` lifts the cap."""
        snapshots: List[RoundSnapshot] = []
        while not self.is_finished():
            if max_rounds is not None and self.round_index >= max_rounds:
                logger.warning(
                    "race stopped after %d rounds without a result; %d agents still racing",
                    self.round_index,
                    sum(1 for agent in self._agents if not agent.has_crashed),
                )
                break
            snapshot = self.play_round()
            snapshots.append(snapshot)
            if on_round:
                on_round(snapshot)

        if self.winner is None and self.all_crashed():
            logger.info("no winner, all agents crashed")
        return RaceResult(
            winner_id=self.winner.agent_id if self.winner else None,
            rounds=self.round_index,
            snapshots=snapshots,
        )

    def _landing_regions(self) -> List[LandingRegion]:
        # Detection runs once per race; each strategy keeps its own visited flags.
        if self._regions is None:
            path = LandingRegionsProcessor().process_landing_regions(self.track)
            self._regions = group_path_into_regions(path, self.track)
        return self._regions

    def _snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            round_index=self.round_index,
            agents=[
                AgentSnapshot(
                    agent_id=agent.agent_id,
                    position=agent.position,
                    velocity=agent.velocity,
                    has_crashed=agent.has_crashed,
                )
                for agent in self._agents
            ],
            winner_id=self.winner.agent_id if self.winner else None,
        )

    def _record_telemetry(self) -> None:
        frames = [
            TelemetryAgentFrame(
                agent_id=agent.agent_id,
                position=(agent.position.row, agent.position.column),
                last_move=(agent.last_move.row, agent.last_move.column),
                velocity=agent.velocity,
                has_crashed=agent.has_crashed,
                strategy=str(agent.strategy),
            )
            for agent in self._agents
        ]
        self.telemetry.record_frame(
            TelemetryFrame(
                round_index=self.round_index,
                winner_id=self.winner.agent_id if self.winner else None,
                agents=frames,
            )
        )
