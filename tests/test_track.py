import dataclasses

import pytest

from vector_race.engine import Cell, CellType, Coordinate, InvalidTrackError, RaceDirection, Track


def _scenario_track() -> Track:
    grid = [
        [Cell(CellType.WALL, Coordinate(0, 0)), Cell(CellType.START, Coordinate(0, 1))],
        [Cell(CellType.FINISH, Coordinate(1, 0)), Cell(CellType.TRACK, Coordinate(1, 1))],
    ]
    return Track(width=2, height=2, grid=grid, number_of_players=5, direction=RaceDirection.COUNTER_CLOCKWISE)


def test_track_constructor_keeps_declared_properties():
    track = _scenario_track()
    assert track.width == 2
    assert track.height == 2
    assert track.number_of_players == 5
    assert track.direction is RaceDirection.COUNTER_CLOCKWISE


def test_start_and_finish_coordinates():
    track = _scenario_track()
    assert track.start_coordinates() == [Coordinate(0, 1)]
    assert track.finish_coordinates() == [Coordinate(1, 0)]
    assert track.finish_set == frozenset({Coordinate(1, 0)})


def test_cell_at_returns_grid_cell():
    track = _scenario_track()
    assert track.cell_at(Coordinate(0, 0)) == Cell(CellType.WALL, Coordinate(0, 0))
    assert track.cell_at(Coordinate(1, 1)) == Cell(CellType.TRACK, Coordinate(1, 1))


def test_cell_at_out_of_bounds_fails_fast():
    track = _scenario_track()
    with pytest.raises(IndexError):
        track.cell_at(Coordinate(2, 0))
    with pytest.raises(IndexError):
        track.cell_at(Coordinate(0, -1))


def test_is_within_boundaries():
    track = _scenario_track()
    assert track.is_within_boundaries(Coordinate(0, 0))
    assert track.is_within_boundaries(Coordinate(1, 1))
    assert not track.is_within_boundaries(Coordinate(0, 2))
    assert not track.is_within_boundaries(Coordinate(2, 0))
    assert not track.is_within_boundaries(Coordinate(-1, 0))


def test_from_rows_matches_explicit_grid():
    track = Track.from_rows(["*+", "- "], number_of_players=5)
    assert track == _scenario_track()
    assert track.rows() == ["*+", "- "]


def test_track_without_start_is_rejected():
    with pytest.raises(InvalidTrackError):
        Track.from_rows(["* ", " -"])


def test_track_with_ragged_rows_is_rejected():
    with pytest.raises(InvalidTrackError):
        Track.from_rows(["*+*", "- "])


def test_track_with_misplaced_cell_is_rejected():
    grid = [[Cell(CellType.START, Coordinate(0, 1)), Cell(CellType.TRACK, Coordinate(0, 1))]]
    with pytest.raises(InvalidTrackError):
        Track(width=2, height=1, grid=grid)


def test_track_without_finish_is_accepted():
    track = Track.from_rows(["*+ *"])
    assert track.finish_coordinates() == []


def test_cell_types_matrix_is_read_only():
    matrix = _scenario_track().cell_types()
    assert matrix.shape == (2, 2)
    assert matrix.tolist() == [[CellType.WALL.code, CellType.START.code], [CellType.FINISH.code, CellType.TRACK.code]]
    with pytest.raises(ValueError):
        matrix[0, 0] = CellType.TRACK.code


def test_cell_type_glyphs_round_trip():
    assert [cell_type.glyph for cell_type in CellType] == ["*", " ", "+", "-"]
    assert CellType.from_char("-") is CellType.FINISH
    with pytest.raises(ValueError):
        CellType.from_char("x")


def test_race_direction_parsing():
    assert RaceDirection.from_str("CW") is RaceDirection.CLOCKWISE
    assert RaceDirection.from_str("ccw") is RaceDirection.COUNTER_CLOCKWISE
    with pytest.raises(ValueError):
        RaceDirection.from_str("north")


def test_coordinate_is_an_immutable_value():
    a = Coordinate(2, 3)
    assert a == Coordinate(2, 3)
    assert len({a, Coordinate(2, 3)}) == 1
    assert a + Coordinate(1, -1) == Coordinate(3, 2)
    assert a - Coordinate(2, 3) == Coordinate(0, 0)
    assert a.shifted(-1, 1) == Coordinate(1, 4)
    assert Coordinate(3, 4).norm() == 5.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        a.row = 7
