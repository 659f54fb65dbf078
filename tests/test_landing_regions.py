from vector_race.engine import (
    Coordinate,
    LandingRegion,
    LandingRegionsDetector,
    LandingRegionsElaborator,
    LandingRegionsProcessor,
    Segment,
    Track,
    group_path_into_regions,
)

SPLIT_ROWS = [
    "*******",
    "*+    *",
    "*  *  *",
    "*******",
]

OVAL_ROWS = [
    "******************************",
    "*             +*-            *",
    "*             +*-            *",
    "*             +*-            *",
    "*   **********************   *",
    "*   **********************   *",
    "*   **********************   *",
    "*   **********************   *",
    "*                            *",
    "*                            *",
    "*                            *",
    "******************************",
]

OPEN_ROWS = ["+       -"] + ["         "] * 8


def _segment(*points) -> Segment:
    return Segment(points=[Coordinate(row, col) for row, col in points])


def test_calculate_segments_covers_every_row():
    track = Track.from_rows(SPLIT_ROWS)
    segments = LandingRegionsDetector().calculate_segments(track, row_based=True)
    assert sorted(segments) == [0, 1, 2, 3]
    assert [len(segments[idx]) for idx in range(4)] == [0, 1, 2, 0]
    assert segments[1][0].points == [Coordinate(1, col) for col in range(2, 6)]


def test_one_to_two_segment_transition_flags_later_row():
    track = Track.from_rows(SPLIT_ROWS)
    detected = LandingRegionsDetector().detect_landing_regions(track)
    points = {point for segment in detected for point in segment}
    assert points == {Coordinate(2, 1), Coordinate(2, 2), Coordinate(2, 4), Coordinate(2, 5)}
    assert not any(point.row == 1 for point in points)


def test_transitions_from_or_to_empty_scanlines_are_ignored():
    detector = LandingRegionsDetector()
    lone = _segment((1, 1))
    pair = [_segment((2, 1)), _segment((2, 4))]
    assert detector.apply_detection_logic({0: [], 1: pair, 2: []}) == []
    assert detector.apply_detection_logic({0: [lone], 1: pair}) == pair
    assert detector.apply_detection_logic({0: pair, 1: [lone]}) == [lone]
    assert detector.apply_detection_logic({0: pair, 1: list(pair)}) == []


def test_landing_region_is_frozen_with_bounding_dimensions():
    cells = [Coordinate(1, 1), Coordinate(1, 4), Coordinate(3, 2)]
    region = LandingRegion(cells)
    cells.append(Coordinate(6, 4))

    assert region.width == 4
    assert region.height == 3
    assert len(region) == 3
    assert region.contains(Coordinate(3, 2))
    assert not region.contains(Coordinate(6, 4))
    assert isinstance(region.cells, frozenset)
    assert not hasattr(region, "add_cell")


def test_elaborator_orders_quadrants_and_appends_finish():
    track = Track.from_rows(OPEN_ROWS)
    segments = [
        _segment((1, 1), (1, 3), (6, 1)),
        _segment((6, 6), (2, 7), (3, 7), (1, 1)),
    ]
    path = LandingRegionsElaborator(track).elaborate_landing_regions(segments)
    assert path == [
        Coordinate(1, 3),
        Coordinate(1, 1),
        Coordinate(6, 1),
        Coordinate(6, 6),
        Coordinate(2, 7),
        Coordinate(3, 7),
        Coordinate(0, 8),
    ]


def test_processor_path_ends_with_finish_line():
    track = Track.from_rows(OVAL_ROWS)
    path = LandingRegionsProcessor().process_landing_regions(track)
    finish = track.finish_coordinates()
    assert len(path) == len(set(path))
    assert path[-len(finish):] == finish
    assert len(path) > len(finish)


def test_group_path_splits_on_gaps_and_closes_with_finish():
    track = Track.from_rows(OPEN_ROWS)
    path = [Coordinate(1, 1), Coordinate(1, 2), Coordinate(5, 5), Coordinate(6, 6), Coordinate(0, 8)]
    regions = group_path_into_regions(path, track)
    assert [region.cells for region in regions] == [
        {Coordinate(1, 1), Coordinate(1, 2)},
        {Coordinate(5, 5), Coordinate(6, 6)},
        {Coordinate(0, 8)},
    ]
    assert regions[-1].is_finish_region(track)
    assert not regions[0].is_finish_region(track)
