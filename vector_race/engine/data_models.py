from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

if TYPE_CHECKING:
    from .strategies import MoveStrategy


class InvalidTrackError(ValueError):
    """Raised when a track violates its structural invariants."""


class CellType(Enum):
    """Kinds of grid cell, each bound to the glyph used in track files."""

    WALL = "*"
    TRACK = " "
    START = "+"
    FINISH = "-"

    @classmethod
    def from_char(cls, symbol: str) -> "CellType":
        try:
            return cls(symbol)
        except ValueError as exc:
            raise ValueError(f"Invalid track symbol: {symbol!r}") from exc

    @property
    def glyph(self) -> str:
        return self.value

    @property
    def code(self) -> int:
        return _CELL_CODES[self]


_CELL_CODES = {
    CellType.WALL: 0,
    CellType.TRACK: 1,
    CellType.START: 2,
    CellType.FINISH: 3,
}


class RaceDirection(Enum):
    """Advisory race direction; the motion rules never enforce it."""

    CLOCKWISE = "cw"
    COUNTER_CLOCKWISE = "ccw"

    @classmethod
    def from_str(cls, value: str) -> "RaceDirection":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError) as exc:
            raise ValueError(f"Unknown race direction: {value}") from exc


@dataclass(frozen=True, order=True)
class Coordinate:
    """Grid position (row, column); also used as a move delta."""

    row: int
    column: int

    def __add__(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.row + other.row, self.column + other.column)

    def __sub__(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.row - other.row, self.column - other.column)

    def shifted(self, d_row: int, d_col: int) -> "Coordinate":
        return Coordinate(self.row + d_row, self.column + d_col)

    def norm(self) -> float:
        """Euclidean length when the coordinate is read as a delta."""
        return math.hypot(self.row, self.column)

    def __repr__(self) -> str:
        return f"({self.row}, {self.column})"


ORIGIN = Coordinate(0, 0)


@dataclass(frozen=True)
class Cell:
    cell_type: CellType
    position: Coordinate


@dataclass(frozen=True)
class Track:
    """
    Immutable rectangular grid of cells.

    The constructor checks the declared dimensions against the grid and
    requires at least one START cell. An empty FINISH set is accepted: such
    a race simply cannot be won.
    """

    width: int
    height: int
    grid: Tuple[Tuple[Cell, ...], ...]
    number_of_players: int = 2
    direction: RaceDirection = RaceDirection.COUNTER_CLOCKWISE

    def __post_init__(self) -> None:
        object.__setattr__(self, "grid", tuple(tuple(row) for row in self.grid))
        if len(self.grid) != self.height:
            raise InvalidTrackError(
                f"Track height {self.height} does not match the {len(self.grid)} grid rows"
            )
        for row_index, row in enumerate(self.grid):
            if len(row) != self.width:
                raise InvalidTrackError(
                    f"Row {row_index} has {len(row)} cells, expected width {self.width}"
                )
            for col_index, cell in enumerate(row):
                if cell.position != Coordinate(row_index, col_index):
                    raise InvalidTrackError(
                        f"Cell at ({row_index}, {col_index}) declares position {cell.position}"
                    )
        if not self.start_coordinates():
            raise InvalidTrackError("No start cells found for this track")

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        number_of_players: int = 2,
        direction: RaceDirection = RaceDirection.COUNTER_CLOCKWISE,
    ) -> "Track":
        """Builds a track from glyph strings, one per grid row."""
        grid = [
            [Cell(CellType.from_char(symbol), Coordinate(r, c)) for c, symbol in enumerate(row)]
            for r, row in enumerate(rows)
        ]
        width = len(rows[0]) if rows else 0
        return cls(
            width=width,
            height=len(rows),
            grid=grid,
            number_of_players=number_of_players,
            direction=direction,
        )

    def is_within_boundaries(self, position: Coordinate) -> bool:
        return 0 <= position.row < self.height and 0 <= position.column < self.width

    def cell_at(self, position: Coordinate) -> Cell:
        if not self.is_within_boundaries(position):
            raise IndexError(f"Position {position} out of track boundaries")
        return self.grid[position.row][position.column]

    def cell_type_at(self, position: Coordinate) -> CellType:
        return self.cell_at(position).cell_type

    def start_coordinates(self) -> List[Coordinate]:
        return self._coordinates_of(CellType.START)

    def finish_coordinates(self) -> List[Coordinate]:
        return self._coordinates_of(CellType.FINISH)

    @cached_property
    def finish_set(self) -> FrozenSet[Coordinate]:
        return frozenset(self.finish_coordinates())

    def cell_types(self) -> np.ndarray:
        """Read-only matrix of cell codes (see ``CellType.code``)."""
        matrix = np.array(
            [[cell.cell_type.code for cell in row] for row in self.grid],
            dtype=np.int8,
        ).reshape(self.height, self.width)
        matrix.setflags(write=False)
        return matrix

    def rows(self) -> List[str]:
        return ["".join(cell.cell_type.glyph for cell in row) for row in self.grid]

    def _coordinates_of(self, cell_type: CellType) -> List[Coordinate]:
        return [cell.position for row in self.grid for cell in row if cell.cell_type is cell_type]


@dataclass
class AgentState:
    """Mutable per-agent race state, advanced once per round by its strategy."""

    agent_id: int
    position: Coordinate
    last_move: Coordinate = ORIGIN
    has_crashed: bool = False
    strategy: Optional["MoveStrategy"] = field(default=None, repr=False, compare=False)

    @property
    def velocity(self) -> float:
        return self.last_move.norm()

    def principal_point(self) -> Coordinate:
        return self.position + self.last_move

    def mark_crashed(self) -> None:
        self.has_crashed = True
