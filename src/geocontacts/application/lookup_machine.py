"""
Lookup lifecycle as an XState machine, interpreted with xstate-python.

The JSON is standard XState (id, initial, states with on: { EVENT: target }),
so the same file opens in Stately Studio.
"""

import json
import os
from pathlib import Path

from xstate.machine import Machine

IDLE = "idle"
SCHEDULED = "scheduled"
IN_FLIGHT = "in_flight"
APPLIED = "applied"
FAILED = "failed"


def get_machine_path() -> Path:
    default = Path(__file__).resolve().parent.parent / "flows" / "lookup_machine.json"
    path = os.environ.get("LOOKUP_MACHINE_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return default


def load_machine(path: Path | None = None) -> dict:
    if path is None:
        path = get_machine_path()
    raw = path.read_text(encoding="utf-8")
    config = json.loads(raw)
    if "initial" not in config or "states" not in config:
        raise ValueError("Machine must have 'initial' and 'states'")
    return config


def _machine_instance(config: dict) -> Machine:
    """Return a Machine instance for this config. Cached per config content."""
    cache: dict[str, Machine] = getattr(_machine_instance, "_cache", {})
    key = json.dumps(config, sort_keys=True)
    if key not in cache:
        cache[key] = Machine(config)
        _machine_instance._cache = cache
    return cache[key]


def transition(machine: dict, state_value: str, event: str) -> str | None:
    """
    Return next state value for (state_value, event), or None if no transition.
    """
    try:
        instance = _machine_instance(machine)
        state = instance.state_from(state_value)
        next_state = instance.transition(state, event)
        if next_state.value == state_value:
            return None
        return next_state.value
    except (ValueError, KeyError):
        return None


# Module-level cache for config dict (for get_machine)
_machine_cache: dict | None = None


def get_machine(cache: bool = True) -> dict:
    global _machine_cache
    if cache and _machine_cache is not None:
        return _machine_cache
    _machine_cache = load_machine()
    return _machine_cache
