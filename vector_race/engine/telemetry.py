from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass
class TelemetryAgentFrame:
    agent_id: int
    position: Tuple[int, int]
    last_move: Tuple[int, int]
    velocity: float
    has_crashed: bool
    strategy: str


@dataclass
class TelemetryFrame:
    round_index: int
    winner_id: Optional[int]
    agents: List[TelemetryAgentFrame] = field(default_factory=list)

    def agent(self, agent_id: int) -> Optional[TelemetryAgentFrame]:
        return next((frame for frame in self.agents if frame.agent_id == agent_id), None)


class TelemetryCollector:
    """Round-by-round record of every agent, replayable after the race."""

    def __init__(self) -> None:
        self.frames: List[TelemetryFrame] = []

    def record_frame(self, frame: TelemetryFrame) -> None:
        self.frames.append(frame)

    def export(self) -> Sequence[TelemetryFrame]:
        return tuple(self.frames)

    def clear(self) -> None:
        self.frames.clear()

    def agent_trail(self, agent_id: int) -> List[Tuple[int, int]]:
        """Positions of one agent after each recorded round."""
        trail: List[Tuple[int, int]] = []
        for frame in self.frames:
            agent_frame = frame.agent(agent_id)
            if agent_frame is not None:
                trail.append(agent_frame.position)
        return trail

    def crash_round(self, agent_id: int) -> Optional[int]:
        """First round in which the agent was seen crashed, if any."""
        for frame in self.frames:
            agent_frame = frame.agent(agent_id)
            if agent_frame is not None and agent_frame.has_crashed:
                return frame.round_index
        return None

    def to_records(self) -> List[Dict[str, Any]]:
        return [asdict(frame) for frame in self.frames]

    def write_json(self, path: Path | str) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump({"frames": self.to_records()}, handle, indent=2)
        return output_path
