from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path

from lane_race_sim.config import (
    CollisionPolicy,
    ConfigurationError,
    SimulationConfig,
    TerminationPolicy,
)
from lane_race_sim.engine import RaceSimulation, SimulationDidNotConverge
from lane_race_sim.event_sink import InMemoryEventSink
from lane_race_sim.logging_utils import configure_logging
from lane_race_sim.models import EntityKind, EntityRecord, ScriptedCommand
from lane_race_sim.reporting import render_leaderboard
from lane_race_sim.stream_io import (
    InputFormatError,
    RaceSpec,
    dump_event_stream,
    load_command_records,
    load_entity_records,
    load_race_spec,
)

DEFAULT_MAX_TICKS = 100_000


def _demo_race() -> RaceSpec:
    # Deterministic demo: one actor dodges, one crashes, one never meets anything.
    entities = [
        EntityRecord("Ana", 0.0, 0, EntityKind.ACTOR),
        EntityRecord("Bruno", 0.0, 1, EntityKind.ACTOR),
        EntityRecord("Carla", 0.0, 2, EntityKind.ACTOR),
        EntityRecord("Cone", 0.5, 0, EntityKind.OBSTACLE),
        EntityRecord("Barrel", 1.0, 1, EntityKind.OBSTACLE),
    ]
    commands = [
        ScriptedCommand(0.45, "Ana", 3),
    ]
    config = SimulationConfig(termination_policy=TerminationPolicy.OUTRUN)
    return RaceSpec(entities=entities, commands=commands, config=config)


def _load_race(args: argparse.Namespace) -> RaceSpec:
    if args.race:
        return load_race_spec(Path(str(args.race)))
    if args.entities:
        entities = load_entity_records(Path(str(args.entities)))
        commands = load_command_records(Path(str(args.commands))) if args.commands else []
        return RaceSpec(entities=entities, commands=commands)
    return _demo_race()


def _apply_overrides(config: SimulationConfig, args: argparse.Namespace) -> SimulationConfig:
    overrides: dict[str, object] = {}
    if args.step_size is not None:
        # A factor-derived tolerance is re-derived from the new step; a pinned one is kept.
        overrides["step_size"] = float(args.step_size)
    if args.collision_policy is not None:
        overrides["collision_policy"] = args.collision_policy
    if args.termination_policy is not None:
        overrides["termination_policy"] = args.termination_policy
    if config.max_ticks is None or args.max_ticks != DEFAULT_MAX_TICKS:
        overrides["max_ticks"] = int(args.max_ticks)
    return dataclasses.replace(config, **overrides)


def _write_events(path: Path, sink: InMemoryEventSink) -> None:
    path.write_text(json.dumps(dump_event_stream(sink.events), indent=2), encoding="utf-8")


def _cmd_run(args: argparse.Namespace) -> int:
    chosen = sum(1 for v in [bool(args.demo), bool(args.race), bool(args.entities)] if v)
    if chosen != 1:
        print("ERROR: choose exactly one of --demo, --race, or --entities.", file=sys.stderr)
        return 2
    if args.commands and not args.entities:
        print("ERROR: --commands requires --entities.", file=sys.stderr)
        return 2

    configure_logging(args.log_level)

    try:
        race = _load_race(args)
    except InputFormatError as e:
        print(f"ERROR: invalid race input: {e}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        config = _apply_overrides(race.config, args)
    except ConfigurationError as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 2

    sink = InMemoryEventSink()
    sim = RaceSimulation(race.entities, race.commands, config, event_sink=sink)

    try:
        ranking = sim.run()
    except SimulationDidNotConverge as e:
        # Partial stream, up to the tick cap.
        if args.events_out:
            _write_events(Path(str(args.events_out)), sink)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.events_out:
        _write_events(Path(str(args.events_out)), sink)

    sys.stdout.write(render_leaderboard(ranking))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="lane_race_sim",
        description=(
            "Lane Race Simulator: deterministic fixed-step race.\n"
            "\n"
            "Scripted actors switch lanes to avoid fixed obstacles.\n"
            "Prints the final leaderboard ordered by distance traveled."
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a race and print the leaderboard.")
    run.add_argument("--demo", action="store_true", help="Run the built-in deterministic demo race.")
    run.add_argument("--race", type=str, help="Run a race spec JSON.")
    run.add_argument("--entities", type=str, help="Plain-text roster (name,position,type,lane).")
    run.add_argument("--commands", type=str, help="Plain-text scripted commands (position,name,lane).")
    run.add_argument(
        "--max-ticks",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help="Safety cap: fail if the race is still running after this many ticks.",
    )
    run.add_argument("--step-size", type=float, default=None, help="Override the fixed per-tick advance.")
    run.add_argument(
        "--collision-policy",
        choices=[p.value for p in CollisionPolicy],
        default=None,
        help="Override the collision policy.",
    )
    run.add_argument(
        "--termination-policy",
        choices=[p.value for p in TerminationPolicy],
        default=None,
        help="Override the termination policy.",
    )
    run.add_argument("--events-out", type=str, default=None, help="Write the event stream JSON here.")
    run.add_argument("--log-level", type=str, default="WARNING", help="Logging level for stderr.")
    run.set_defaults(func=_cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
