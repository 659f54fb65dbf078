"""
Landing-region analysis of a grid track.

Corners and merges are inferred from changes in the number of contiguous
TRACK runs between adjacent scanlines; the elaborator then orders the flagged
cells quadrant by quadrant into a single heuristic path ending on the finish
line. The path is a plausible traversal order, not a shortest path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .data_models import CellType, Coordinate, Track

logger = logging.getLogger(__name__)


@dataclass
class Segment:
    """Maximal run of TRACK cells along one row or column."""

    points: List[Coordinate] = field(default_factory=list)

    def add_point(self, point: Coordinate) -> None:
        self.points.append(point)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.points)


class LandingRegion:
    """An immutable zone of interest; bounding width/height are computed on first use."""

    def __init__(self, cells: Iterable[Coordinate]) -> None:
        self._cells: FrozenSet[Coordinate] = frozenset(cells)
        self._dimensions: Optional[Tuple[int, int]] = None

    @property
    def cells(self) -> FrozenSet[Coordinate]:
        return self._cells

    def contains(self, coordinate: Coordinate) -> bool:
        return coordinate in self._cells

    @property
    def width(self) -> int:
        return self._bounding_box()[0]

    @property
    def height(self) -> int:
        return self._bounding_box()[1]

    def is_finish_region(self, track: Track) -> bool:
        finish = track.finish_set
        return bool(finish) and finish <= self._cells

    def _bounding_box(self) -> Tuple[int, int]:
        if self._dimensions is None:
            if not self._cells:
                self._dimensions = (0, 0)
            else:
                rows = [cell.row for cell in self._cells]
                cols = [cell.column for cell in self._cells]
                self._dimensions = (max(cols) - min(cols) + 1, max(rows) - min(rows) + 1)
        return self._dimensions

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"LandingRegion(cells={len(self._cells)}, width={self.width}, height={self.height})"


class LandingRegionsDetector:
    """Flags scanline segments that follow a change in segment count."""

    def detect_landing_regions(self, track: Track) -> List[Segment]:
        horizontal = self.apply_detection_logic(self.calculate_segments(track, row_based=True))
        vertical = self.apply_detection_logic(self.calculate_segments(track, row_based=False))
        logger.debug(
            "detected %d horizontal and %d vertical landing segments",
            len(horizontal),
            len(vertical),
        )
        return horizontal + vertical

    def calculate_segments(self, track: Track, row_based: bool) -> Dict[int, List[Segment]]:
        """Contiguous TRACK runs for every row (or column) index, empty lists included."""
        outer_limit = track.height if row_based else track.width
        inner_limit = track.width if row_based else track.height

        segments_by_index: Dict[int, List[Segment]] = {}
        for outer in range(outer_limit):
            segments: List[Segment] = []
            current: Optional[Segment] = None
            for inner in range(inner_limit):
                position = Coordinate(outer, inner) if row_based else Coordinate(inner, outer)
                if track.cell_type_at(position) is CellType.TRACK:
                    if current is None:
                        current = Segment()
                    current.add_point(position)
                elif current is not None:
                    segments.append(current)
                    current = None
            if current is not None:
                segments.append(current)
            segments_by_index[outer] = segments
        return segments_by_index

    def apply_detection_logic(self, segments_by_index: Dict[int, List[Segment]]) -> List[Segment]:
        """
        Returns the segments at index ``i`` whenever indices ``i - 1`` and ``i``
        both hold segments but in different numbers. Transitions from or to an
        empty scanline are ignored.
        """
        landing_regions: List[Segment] = []
        indices = sorted(segments_by_index)
        for previous, current in zip(indices, indices[1:]):
            if current != previous + 1:
                continue
            previous_count = len(segments_by_index[previous])
            current_count = len(segments_by_index[current])
            if previous_count and current_count and previous_count != current_count:
                landing_regions.extend(segments_by_index[current])
        return landing_regions


CoordinatePredicate = Callable[[int, int], bool]
SortKey = Callable[[Coordinate], Tuple[int, int]]


class LandingRegionsElaborator:
    """Turns detected segments into one ordered coordinate path ending on the finish line."""

    def __init__(self, track: Track) -> None:
        self.track = track
        half_row = track.height // 2
        half_col = track.width // 2
        # Quadrants in travel order, each with the ordering that walks it along the track.
        self._sections: Tuple[Tuple[CoordinatePredicate, SortKey], ...] = (
            (lambda row, col: row <= half_row and col <= half_col, lambda c: (-c.column, c.row)),
            (lambda row, col: row > half_row and col <= half_col, lambda c: (c.row, c.column)),
            (lambda row, col: row > half_row and col > half_col, lambda c: (-c.column, -c.row)),
            (lambda row, col: row <= half_row and col > half_col, lambda c: (c.row, -c.column)),
        )

    def elaborate_landing_regions(self, landing_regions: Sequence[Segment]) -> List[Coordinate]:
        coordinates = [point for segment in landing_regions for point in segment]
        ordered: List[Coordinate] = []
        for predicate, sort_key in self._sections:
            section = [c for c in coordinates if predicate(c.row, c.column)]
            section.sort(key=sort_key)
            ordered.extend(section)
        ordered.extend(self.track.finish_coordinates())
        # dict keeps first-seen order
        return list(dict.fromkeys(ordered))


class LandingRegionsProcessor:
    """Runs detection followed by elaboration for a track."""

    def __init__(
        self,
        detector: Optional[LandingRegionsDetector] = None,
        elaborator_factory: Callable[[Track], LandingRegionsElaborator] = LandingRegionsElaborator,
    ) -> None:
        self.detector = detector or LandingRegionsDetector()
        self.elaborator_factory = elaborator_factory

    def process_landing_regions(self, track: Track) -> List[Coordinate]:
        segments = self.detector.detect_landing_regions(track)
        return self.elaborator_factory(track).elaborate_landing_regions(segments)


def _adjacent(a: Coordinate, b: Coordinate) -> bool:
    return max(abs(a.row - b.row), abs(a.column - b.column)) <= 1


def group_path_into_regions(path: Sequence[Coordinate], track: Track) -> List[LandingRegion]:
    """
    Splits an elaborated path into regions of consecutive, 8-adjacent cells.

    Finish cells are gathered into one closing region so the finish line is
    always the last target.
    """
    finish = track.finish_set
    regions: List[LandingRegion] = []
    current: List[Coordinate] = []
    for coordinate in path:
        if coordinate in finish:
            continue
        if current and not _adjacent(current[-1], coordinate):
            regions.append(LandingRegion(current))
            current = []
        current.append(coordinate)
    if current:
        regions.append(LandingRegion(current))
    if finish:
        regions.append(LandingRegion(track.finish_coordinates()))
    logger.debug("grouped %d path cells into %d landing regions", len(path), len(regions))
    return regions
