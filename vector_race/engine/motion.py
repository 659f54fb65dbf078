from __future__ import annotations

import logging
import math
from typing import List

from .data_models import AgentState, CellType, Coordinate, Track

logger = logging.getLogger(__name__)

# Row-major order keeps candidate iteration stable across runs.
NEIGHBOURHOOD_SHIFTS = tuple((d_row, d_col) for d_row in (-1, 0, 1) for d_col in (-1, 0, 1))

AXIS_DIRECTIONS = ((-1, 0), (0, 1), (1, 0), (0, -1))


def principal_point(agent: AgentState) -> Coordinate:
    """Cell the agent reaches if it repeats its last move unchanged."""
    return agent.principal_point()


def neighbourhood(point: Coordinate) -> List[Coordinate]:
    return [point.shifted(d_row, d_col) for d_row, d_col in NEIGHBOURHOOD_SHIFTS]


def bounded_candidates(agent: AgentState, track: Track) -> List[Coordinate]:
    """The 3x3 moves around the principal point that stay inside the grid."""
    return [move for move in neighbourhood(principal_point(agent)) if track.is_within_boundaries(move)]


def unbounded_candidates(agent: AgentState) -> List[Coordinate]:
    """The full 3x3 neighbourhood, including walls and cells off the grid."""
    return neighbourhood(principal_point(agent))


def apply_move(agent: AgentState, destination: Coordinate) -> None:
    """
    Moves the agent without any legality check.

    Callers are expected to run crash detection afterwards.
    """
    agent.last_move = destination - agent.position
    agent.position = destination
    logger.debug(
        "agent %s -> %s (move %s, velocity %.3f)",
        agent.agent_id,
        destination,
        agent.last_move,
        agent.velocity,
    )


def check_crashed(agent: AgentState, track: Track) -> bool:
    if track.cell_type_at(agent.position) is CellType.WALL:
        agent.mark_crashed()
    return agent.has_crashed


def is_winner(agent: AgentState, track: Track) -> bool:
    return agent.position in track.finish_set


def manhattan_distance(a: Coordinate, b: Coordinate) -> int:
    return abs(a.row - b.row) + abs(a.column - b.column)


def theoretical_velocity(position: Coordinate, move: Coordinate) -> float:
    return math.hypot(move.row - position.row, move.column - position.column)


def distance_to_wall(track: Track, start: Coordinate, d_row: int, d_col: int) -> int:
    """Steps from ``start`` to the first WALL along one axis; the grid edge counts as a wall."""
    distance = 0
    while True:
        distance += 1
        probe = start.shifted(distance * d_row, distance * d_col)
        if not track.is_within_boundaries(probe):
            return distance
        if track.cell_type_at(probe) is CellType.WALL:
            return distance


def distance_from_borders(track: Track, position: Coordinate) -> int:
    return min(distance_to_wall(track, position, d_row, d_col) for d_row, d_col in AXIS_DIRECTIONS)
