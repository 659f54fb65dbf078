import json
from pathlib import Path

import pytest

from vector_race.engine import (
    CellType,
    Coordinate,
    InvalidTrackError,
    InvalidTrackFileError,
    RaceDirection,
    load_json_track,
)
from vector_race.engine.track_registry import TrackRegistry

BUNDLED_OVAL = Path(__file__).resolve().parents[1] / "racetracks" / "oval_ccw.json"


def _payload(**overrides):
    payload = {
        "width": 5,
        "height": 3,
        "numPlayers": 2,
        "direction": "cw",
        "track": ["*****", "*+ -*", "*****"],
    }
    payload.update(overrides)
    return payload


def _write(tmp_path, payload, name="track.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return path


def test_loads_valid_track(tmp_path):
    track = load_json_track(_write(tmp_path, _payload()))

    assert (track.width, track.height) == (5, 3)
    assert track.number_of_players == 2
    assert track.direction is RaceDirection.CLOCKWISE
    assert track.start_coordinates() == [Coordinate(1, 1)]
    assert track.cell_type_at(Coordinate(1, 3)) is CellType.FINISH


def test_loads_bundled_oval():
    track = load_json_track(BUNDLED_OVAL)
    assert (track.width, track.height) == (30, 12)
    assert track.direction is RaceDirection.COUNTER_CLOCKWISE
    assert len(track.start_coordinates()) == 3


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json_track(tmp_path / "nope.json")


def test_rejects_non_json_suffix(tmp_path):
    path = _write(tmp_path, _payload(), name="track.txt")
    with pytest.raises(InvalidTrackFileError):
        load_json_track(path)


def test_rejects_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{\"width\": 5,")
    with pytest.raises(InvalidTrackFileError):
        load_json_track(path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"track": ["*****", "*+ -", "*****"]},
        {"track": ["*****", "*+ -*"]},
        {"track": ["*****", "*+x-*", "*****"]},
        {"numPlayers": 1},
        {"numPlayers": 11},
        {"width": 100},
        {"width": "5"},
        {"height": True},
        {"direction": "sideways"},
        {"track": "*****"},
    ],
)
def test_rejects_invalid_configuration(tmp_path, overrides):
    with pytest.raises(InvalidTrackFileError):
        load_json_track(_write(tmp_path, _payload(**overrides)))


def test_rejects_missing_keys(tmp_path):
    payload = _payload()
    del payload["direction"]
    with pytest.raises(InvalidTrackFileError, match="direction"):
        load_json_track(_write(tmp_path, payload))


def test_track_without_start_line(tmp_path):
    payload = _payload(track=["*****", "*  -*", "*****"])
    with pytest.raises(InvalidTrackError, match="No start cells"):
        load_json_track(_write(tmp_path, payload))


def test_registry_indexes_and_caches(tmp_path):
    _write(tmp_path, _payload(), name="Short Corridor.json")
    registry = TrackRegistry(tmp_path)

    descriptors = list(registry.list_tracks())
    assert [d.track_id for d in descriptors] == ["short_corridor"]

    track = registry.load("short_corridor")
    assert registry.load("Short_Corridor") is track
    with pytest.raises(KeyError):
        registry.load("oval")


def test_default_registry_finds_bundled_tracks():
    registry = TrackRegistry()
    assert "oval_ccw" in [d.track_id for d in registry.list_tracks()]


def test_registry_reads_headers_and_filters_by_players(tmp_path):
    _write(tmp_path, _payload(), name="duel.json")
    _write(tmp_path, _payload(numPlayers=6), name="crowd.json")
    (tmp_path / "broken.json").write_text("{")
    registry = TrackRegistry(tmp_path)

    crowd = registry.describe("CROWD")
    assert (crowd.width, crowd.height, crowd.number_of_players) == (5, 3, 6)
    assert registry.describe("broken").number_of_players is None
    assert [d.track_id for d in registry.tracks_for_players(4)] == ["crowd"]
    assert sorted(d.track_id for d in registry.tracks_for_players(2)) == ["crowd", "duel"]
    with pytest.raises(KeyError):
        registry.describe("missing")
