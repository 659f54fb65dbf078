from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .data_models import Cell, CellType, Coordinate, RaceDirection, Track

MAX_WIDTH = 100
MAX_HEIGHT = 100
MIN_PLAYERS = 2
MAX_PLAYERS = 10

REQUIRED_KEYS = ("width", "height", "numPlayers", "direction", "track")


class InvalidTrackFileError(ValueError):
    pass


def load_json_track(path: Path | str) -> Track:
    """Loads a racetrack JSON file, returning a validated Track."""

    track_path = Path(path)
    if not track_path.exists():
        raise FileNotFoundError(track_path)
    if track_path.suffix.lower() != ".json":
        raise InvalidTrackFileError(f"Not a JSON file: {track_path.name}")

    try:
        with track_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise InvalidTrackFileError(f"Error reading the configuration file: {exc}") from exc

    return parse_track(payload)


def parse_track(payload: Dict[str, Any]) -> Track:
    if not isinstance(payload, dict):
        raise InvalidTrackFileError("Track configuration must be a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        raise InvalidTrackFileError(f"Missing keys in track configuration: {', '.join(missing)}")

    width = _as_int(payload, "width")
    height = _as_int(payload, "height")
    number_of_players = _as_int(payload, "numPlayers")
    direction = _parse_direction(payload["direction"])
    _validate_ranges(width, height, number_of_players)

    grid = _parse_grid(payload["track"], width, height)
    return Track(
        width=width,
        height=height,
        grid=grid,
        number_of_players=number_of_players,
        direction=direction,
    )


def _as_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTrackFileError(f"'{key}' must be an integer, got {value!r}")
    return value


def _parse_direction(value: Any) -> RaceDirection:
    try:
        return RaceDirection.from_str(value)
    except ValueError as exc:
        raise InvalidTrackFileError(str(exc)) from exc


def _validate_ranges(width: int, height: int, number_of_players: int) -> None:
    if not 0 < width < MAX_WIDTH:
        raise InvalidTrackFileError(f"Track width {width} outside 1..{MAX_WIDTH - 1}")
    if not 0 < height < MAX_HEIGHT:
        raise InvalidTrackFileError(f"Track height {height} outside 1..{MAX_HEIGHT - 1}")
    if not MIN_PLAYERS <= number_of_players <= MAX_PLAYERS:
        raise InvalidTrackFileError(
            f"Number of players {number_of_players} outside {MIN_PLAYERS}..{MAX_PLAYERS}"
        )


def _parse_grid(rows: Any, width: int, height: int) -> List[List[Cell]]:
    if not isinstance(rows, list):
        raise InvalidTrackFileError("Track layout is missing or not properly formatted.")
    if len(rows) != height:
        raise InvalidTrackFileError("Track height does not match the specified height.")

    grid: List[List[Cell]] = []
    for row_index, row in enumerate(rows):
        if not isinstance(row, str) or len(row) != width:
            raise InvalidTrackFileError(f"Row {row_index} does not match the specified width")
        cells: List[Cell] = []
        for col_index, symbol in enumerate(row):
            try:
                cell_type = CellType.from_char(symbol)
            except ValueError as exc:
                raise InvalidTrackFileError(
                    f"Invalid cell character {symbol!r} at ({row_index}, {col_index})"
                ) from exc
            cells.append(Cell(cell_type, Coordinate(row_index, col_index)))
        grid.append(cells)
    return grid
