"""
Process presets.

Named process definitions stored as YAML. Steps are written either as
five-element lists (long name, short name, seconds, tweakable, light) or as
mappings with the StepDefinition field names.

PyYAML reads bare on / off as booleans; for the light field they are mapped
back to the light modes the timer core understands.
"""

from pathlib import Path
from typing import Any, Dict, List

import yaml

from timer_core import InvalidArgument, Process, StepDefinition


class PresetLibrary:
    """Named step-definition lists loaded from a presets file."""

    def __init__(self, definitions: Dict[str, List[StepDefinition]]):
        self._definitions = dict(definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> List[str]:
        return list(self._definitions)

    def definitions(self, name: str) -> List[StepDefinition]:
        if name not in self._definitions:
            raise KeyError(name)
        return list(self._definitions[name])

    def build(self, name: str, **kwargs) -> Process:
        """Create a fresh Process for one run."""
        return Process(name, self.definitions(name), **kwargs)


def _light_field(value: Any) -> Any:
    if value is True:
        return "on"
    if value is False:
        return "off"
    return value


def _step_definition(raw: Any, process_name: str, position: int) -> StepDefinition:
    fields = StepDefinition._fields
    if isinstance(raw, dict):
        missing = [f for f in fields if f not in raw]
        if missing:
            raise InvalidArgument(
                f"{process_name!r} step {position} is missing {', '.join(missing)}"
            )
        values = [raw[f] for f in fields]
    elif isinstance(raw, list):
        if len(raw) != len(fields):
            raise InvalidArgument(
                f"{process_name!r} step {position} needs {len(fields)} fields, got {len(raw)}"
            )
        values = list(raw)
    else:
        raise InvalidArgument(f"{process_name!r} step {position} must be a list or mapping")

    long_name, short_name, seconds, tweakable, light = values
    # bare YAML scalars such as No or ~ load as bool or None
    for label, value in (("long name", long_name), ("short name", short_name)):
        if not isinstance(value, str):
            raise InvalidArgument(
                f"{process_name!r} step {position} {label} must be a string, got {value!r}"
            )
    return StepDefinition(long_name, short_name, seconds, tweakable, _light_field(light))


def parse_presets(data: Any) -> PresetLibrary:
    """Build a PresetLibrary from already-parsed YAML data."""
    if not isinstance(data, dict) or not isinstance(data.get("processes"), list):
        raise InvalidArgument("presets must contain a 'processes' list")

    definitions: Dict[str, List[StepDefinition]] = {}
    for entry in data["processes"]:
        if not isinstance(entry, dict) or "name" not in entry:
            raise InvalidArgument("each preset needs a name")
        name = entry["name"]
        if not isinstance(name, str):
            raise InvalidArgument(f"preset name must be a string, got {name!r}")
        steps = entry.get("steps") or []
        if not isinstance(steps, list):
            raise InvalidArgument(f"{name!r} steps must be a list")
        definitions[name] = [_step_definition(raw, name, i) for i, raw in enumerate(steps)]
        # validate now, not at first run
        Process(name, definitions[name])

    return PresetLibrary(definitions)


def load_presets(path: Path) -> PresetLibrary:
    """
    Load a presets file using YAML safe_load.

    safe_load also parses pure JSON, so .json presets work unchanged.
    """
    with open(path, encoding="utf-8") as f:
        return parse_presets(yaml.safe_load(f))
