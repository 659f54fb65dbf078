from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np

from .data_models import AgentState, CellType, Track

_GLYPHS: Dict[int, str] = {cell_type.code: cell_type.glyph for cell_type in CellType}


def render_grid(track: Track, agents: Sequence[AgentState]) -> List[str]:
    """Track glyph rows with each racing agent's id drawn over its cell."""
    canvas = np.vectorize(_GLYPHS.__getitem__, otypes=[object])(track.cell_types())
    for agent in agents:
        if agent.has_crashed or not track.is_within_boundaries(agent.position):
            continue
        canvas[agent.position.row, agent.position.column] = str(agent.agent_id)
    return ["".join(row) for row in canvas.tolist()]


def render_status(track: Track, agents: Sequence[AgentState]) -> List[str]:
    lines: List[str] = []
    racing = [agent for agent in agents if not agent.has_crashed]
    if racing and all(track.cell_type_at(agent.position) is CellType.START for agent in racing):
        lines.append("Players on their marks")
    crashed = [str(agent.agent_id) for agent in agents if agent.has_crashed]
    if crashed:
        lines.append("Crashed players: " + " ".join(crashed))
    return lines


def render_race(track: Track, agents: Sequence[AgentState]) -> str:
    return "\n".join(render_grid(track, agents) + render_status(track, agents)) + "\n"
