from __future__ import annotations

import csv
import json
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from lane_race_sim.config import SimulationConfig
from lane_race_sim.events import Event
from lane_race_sim.models import EntityKind, EntityRecord, ScriptedCommand


class InputFormatError(ValueError):
    """Raised when a race input file fails validation."""


@dataclass(frozen=True)
class RaceSpec:
    entities: list[EntityRecord]
    commands: list[ScriptedCommand] = field(default_factory=list)
    config: SimulationConfig = field(default_factory=SimulationConfig)


# Single-letter entity types used by the plain-text roster format.
_LEGACY_KINDS = {"p": EntityKind.ACTOR, "o": EntityKind.OBSTACLE}


def _read_text(path: Path) -> str:
    if not path.exists():
        raise InputFormatError(f"file not found: {path}")
    if not path.is_file():
        raise InputFormatError(f"not a file: {path}")
    return path.read_text(encoding="utf-8")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def load_race_spec(path: Path) -> RaceSpec:
    """Load and validate a race spec.

    Format:
      {
        "entities": [
          {"name": "Alice", "offset": 0.0, "lane": 0, "kind": "actor"},
          {"name": "Cone", "offset": 1.0, "lane": 1, "kind": "obstacle", "footprint_length": 0.2},
          ...
        ],
        "commands": [
          {"trigger": 0.45, "actor": "Alice", "lane": 1},
          ...
        ],
        "options": {"step_size": 0.05, "termination_policy": "outrun"}
      }

    "commands" and "options" are optional. Options are validated by
    SimulationConfig and raise ConfigurationError.
    """
    text = _read_text(path)
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputFormatError(
            f"invalid JSON: {e.msg} (line {e.lineno}, col {e.colno})"
        ) from e

    if not isinstance(raw, dict):
        raise InputFormatError("root must be a JSON object")

    entities_raw = raw.get("entities")
    commands_raw = raw.get("commands", [])
    options_raw = raw.get("options", {})

    if not isinstance(entities_raw, list) or not entities_raw:
        raise InputFormatError("entities must be a non-empty array")

    entities: list[EntityRecord] = []
    seen_names: set[str] = set()
    for i, item in enumerate(entities_raw):
        if not isinstance(item, dict):
            raise InputFormatError(f"entities[{i}] must be an object")
        record = _parse_entity(item, label=f"entities[{i}]")
        if record.name in seen_names:
            raise InputFormatError(f"duplicate entity name {record.name!r}")
        seen_names.add(record.name)
        entities.append(record)

    if not isinstance(commands_raw, list):
        raise InputFormatError("commands must be an array")
    commands: list[ScriptedCommand] = []
    for i, item in enumerate(commands_raw):
        if not isinstance(item, dict):
            raise InputFormatError(f"commands[{i}] must be an object")
        commands.append(_parse_command(item, label=f"commands[{i}]"))

    if options_raw is None:
        options_raw = {}
    if not isinstance(options_raw, dict):
        raise InputFormatError("options must be an object")

    return RaceSpec(
        entities=entities,
        commands=commands,
        config=SimulationConfig.from_mapping(options_raw),
    )


def _parse_entity(raw: dict[str, Any], *, label: str) -> EntityRecord:
    name = raw.get("name")
    offset = raw.get("offset")
    lane = raw.get("lane")
    kind = raw.get("kind")

    if not isinstance(name, str) or not name.strip():
        raise InputFormatError(f"{label}.name must be a non-empty string")
    if not _is_number(offset):
        raise InputFormatError(f"{label}.offset must be a finite number")
    if not _is_int(lane):
        raise InputFormatError(f"{label}.lane must be an int")
    try:
        entity_kind = EntityKind(kind)
    except ValueError as e:
        raise InputFormatError(f"{label}.kind must be 'actor' or 'obstacle' (got {kind!r})") from e

    footprint = raw.get("footprint_length", None)
    if footprint is not None:
        if entity_kind != EntityKind.OBSTACLE:
            raise InputFormatError(f"{label}.footprint_length is only valid for obstacles")
        if not _is_number(footprint) or footprint < 0:
            raise InputFormatError(f"{label}.footprint_length must be a number >= 0 when provided")

    return EntityRecord(
        name=str(name),
        offset=float(offset),
        lane=int(lane),
        kind=entity_kind,
        footprint_length=float(footprint) if footprint is not None else 0.0,
    )


def _parse_command(raw: dict[str, Any], *, label: str) -> ScriptedCommand:
    trigger = raw.get("trigger")
    actor = raw.get("actor")
    lane = raw.get("lane")

    if not _is_number(trigger):
        raise InputFormatError(f"{label}.trigger must be a finite number")
    if not isinstance(actor, str) or not actor.strip():
        raise InputFormatError(f"{label}.actor must be a non-empty string")
    if not _is_int(lane):
        raise InputFormatError(f"{label}.lane must be an int")

    return ScriptedCommand(trigger=float(trigger), actor_name=str(actor), destination_lane=int(lane))


def _csv_rows(path: Path, *, width: int, label: str) -> list[tuple[int, list[str]]]:
    text = _read_text(path)
    rows: list[tuple[int, list[str]]] = []
    for lineno, row in enumerate(csv.reader(text.splitlines()), start=1):
        if not row or not "".join(row).strip():
            continue
        if len(row) != width:
            raise InputFormatError(
                f"{label} line {lineno}: expected {width} comma-separated fields, got {len(row)}"
            )
        rows.append((lineno, [cell.strip() for cell in row]))
    return rows


def load_entity_records(path: Path) -> list[EntityRecord]:
    """Load a plain-text roster: one ``name,position,type,lane`` per line.

    type is ``p`` for an actor (player) and ``o`` for an obstacle.
    """
    records: list[EntityRecord] = []
    for lineno, (name, position, kind, lane) in _csv_rows(path, width=4, label=path.name):
        where = f"{path.name} line {lineno}"
        if not name:
            raise InputFormatError(f"{where}: name must be non-empty")
        if kind not in _LEGACY_KINDS:
            raise InputFormatError(f"{where}: type {kind!r} not supported (expected 'p' or 'o')")
        try:
            offset = float(position)
            lane_index = int(lane)
        except ValueError as e:
            raise InputFormatError(f"{where}: invalid position or lane ({e})") from e
        if not math.isfinite(offset):
            raise InputFormatError(f"{where}: position must be finite")
        records.append(EntityRecord(name=name, offset=offset, lane=lane_index, kind=_LEGACY_KINDS[kind]))
    return records


def load_command_records(path: Path) -> list[ScriptedCommand]:
    """Load plain-text scripted commands: one ``position,name,lane`` per line."""
    commands: list[ScriptedCommand] = []
    for lineno, (position, name, lane) in _csv_rows(path, width=3, label=path.name):
        where = f"{path.name} line {lineno}"
        if not name:
            raise InputFormatError(f"{where}: name must be non-empty")
        try:
            trigger = float(position)
            lane_index = int(lane)
        except ValueError as e:
            raise InputFormatError(f"{where}: invalid position or lane ({e})") from e
        if not math.isfinite(trigger):
            raise InputFormatError(f"{where}: position must be finite")
        commands.append(ScriptedCommand(trigger=trigger, actor_name=name, destination_lane=lane_index))
    return commands


def dump_event_stream(events: list[Event]) -> list[dict[str, Any]]:
    """Return a JSON-serializable event stream."""
    out: list[dict[str, Any]] = []
    for e in events:
        d = asdict(e)
        d["type"] = str(e.type.value)
        out.append(d)
    return out
