from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .data_models import Track
from .track_loader import load_json_track

logger = logging.getLogger(__name__)


def _default_track_directory() -> Path:
    return Path(__file__).resolve().parents[2] / "racetracks"


@dataclass(frozen=True)
class TrackDescriptor:
    """Header of a JSON track file, read without building the grid."""

    track_id: str
    name: str
    path: Path
    width: Optional[int] = None
    height: Optional[int] = None
    number_of_players: Optional[int] = None


def _read_header(track_file: Path) -> Dict[str, Optional[int]]:
    try:
        with track_file.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Skipping header of %s: %s", track_file, exc)
        return {}
    if not isinstance(payload, dict):
        return {}
    return {
        "width": payload.get("width"),
        "height": payload.get("height"),
        "number_of_players": payload.get("numPlayers"),
    }


class TrackRegistry:
    """Directory of JSON racetracks, addressed by lower-case id and parsed on first use."""

    def __init__(self, track_directory: Optional[Path] = None) -> None:
        self.track_directory = Path(track_directory) if track_directory else _default_track_directory()
        self._cache: Dict[str, Track] = {}
        self._descriptors: Dict[str, TrackDescriptor] = {}
        self._index_directory()

    def _index_directory(self) -> None:
        if not self.track_directory.is_dir():
            logger.warning("Track directory %s does not exist", self.track_directory)
            return
        for track_file in sorted(self.track_directory.glob("*.json")):
            track_id = track_file.stem.lower().replace(" ", "_")
            if track_id in self._descriptors:
                logger.warning("Duplicate track id %s from %s ignored", track_id, track_file)
                continue
            self._descriptors[track_id] = TrackDescriptor(
                track_id=track_id,
                name=track_file.stem,
                path=track_file,
                **_read_header(track_file),
            )

    def describe(self, track_id: str) -> TrackDescriptor:
        key = track_id.lower()
        if key not in self._descriptors:
            raise KeyError(f"Track '{track_id}' not found in {self.track_directory}")
        return self._descriptors[key]

    def load(self, track_id: str) -> Track:
        descriptor = self.describe(track_id)
        track = self._cache.get(descriptor.track_id)
        if track is None:
            track = load_json_track(descriptor.path)
            self._cache[descriptor.track_id] = track
        return track

    def tracks_for_players(self, count: int) -> List[TrackDescriptor]:
        """Tracks whose header declares room for at least ``count`` players."""
        return [
            descriptor
            for descriptor in self._descriptors.values()
            if isinstance(descriptor.number_of_players, int) and descriptor.number_of_players >= count
        ]

    def list_tracks(self) -> Iterable[TrackDescriptor]:
        return list(self._descriptors.values())
