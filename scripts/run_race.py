"""
Utility script to run a single CPU race on a grid track.

Usage:
    python scripts/run_race.py --track oval_ccw
    python scripts/run_race.py --track path/to/track.json --seed 7 --silent

Tracks are looked up by id in the racetracks/ directory unless a path to a
JSON file is given.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when script is executed from anywhere
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.append(REPO_ROOT)

from vector_race.engine import (  # noqa: E402
    InvalidTrackError,
    InvalidTrackFileError,
    RaceLoop,
    StrategyKind,
    TelemetryCollector,
    load_json_track,
)
from vector_race.engine.race_loop import DEFAULT_MAX_ROUNDS, DEFAULT_SEED  # noqa: E402
from vector_race.engine.track_registry import TrackRegistry  # noqa: E402
from vector_race.engine.visualizer import render_race  # noqa: E402


def _resolve_track(track_arg: str, tracks_dir: str | None):
    candidate = Path(track_arg)
    if candidate.suffix.lower() == ".json":
        return load_json_track(candidate)
    registry = TrackRegistry(Path(tracks_dir) if tracks_dir else None)
    return registry.load(track_arg)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a grid vector race between CPU players.")
    parser.add_argument("--track", help="Track id in the tracks directory, or a path to a JSON track file.")
    parser.add_argument("--tracks-dir", default=None, help="Directory holding JSON tracks.")
    parser.add_argument("--list", action="store_true", help="List the available tracks and exit.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for ids and random strategies.")
    parser.add_argument(
        "--strategy",
        action="append",
        choices=[kind.value for kind in StrategyKind],
        help="Strategy to assign round-robin; repeat for several. Defaults to alternating weighted/landing.",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=DEFAULT_MAX_ROUNDS,
        help=f"Stop after this many rounds (default {DEFAULT_MAX_ROUNDS}).",
    )
    parser.add_argument("--telemetry", default=None, help="Write per-round agent frames to this JSON file.")
    parser.add_argument("--silent", action="store_true", help="Only print the outcome.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        for descriptor in TrackRegistry(Path(args.tracks_dir) if args.tracks_dir else None).list_tracks():
            print(
                f"{descriptor.track_id}\t{descriptor.width}x{descriptor.height}"
                f"\t{descriptor.number_of_players} players\t{descriptor.path}"
            )
        return
    if not args.track:
        parser.error("--track is required unless --list is given")

    try:
        track = _resolve_track(args.track, args.tracks_dir)
    except FileNotFoundError as e:
        print(f"File not found: {e}")
        sys.exit(1)
    except KeyError as e:
        print(f"Unknown track: {e}")
        sys.exit(1)
    except (InvalidTrackError, InvalidTrackFileError) as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)

    kinds = [StrategyKind(value) for value in args.strategy] if args.strategy else None
    telemetry = TelemetryCollector() if args.telemetry else None
    race = RaceLoop(track, kinds, seed=args.seed, telemetry=telemetry)

    if not args.silent:
        print("*****************GAME INITIALIZED*****************")
        print(render_race(track, race.agents))

    def _print_round(snapshot) -> None:
        print(f"******************** ROUND {snapshot.round_index} ********************")
        print(render_race(track, race.agents))

    result = race.run(on_round=None if args.silent else _print_round, max_rounds=args.max_rounds)

    if result.winner_id is not None:
        print("*****************THE WINNER IS******************")
        print(f"Player {result.winner_id} after {result.rounds} rounds")
    elif race.all_crashed():
        print("NO WINNER, ALL PLAYERS CRASHED")
    else:
        print(f"No result after {result.rounds} rounds")

    if telemetry is not None:
        output_path = telemetry.write_json(args.telemetry)
        print(f"Telemetry: {len(telemetry.frames)} frames written to {output_path}")


if __name__ == "__main__":
    main()
