"""Tests for the lookup lifecycle machine (JSON + xstate)."""

import json

import pytest

from geocontacts.application.lookup_machine import (
    APPLIED,
    FAILED,
    IDLE,
    IN_FLIGHT,
    SCHEDULED,
    get_machine,
    get_machine_path,
    load_machine,
    transition,
)


def test_default_machine_file_exists():
    path = get_machine_path()
    assert path.name == "lookup_machine.json"
    assert path.exists()


def test_load_machine_has_all_states():
    machine = load_machine()
    assert machine["initial"] == IDLE
    assert set(machine["states"]) == {IDLE, SCHEDULED, IN_FLIGHT, APPLIED, FAILED}


def test_machine_path_env_override(tmp_path, monkeypatch):
    custom = tmp_path / "machine.json"
    custom.write_text(
        json.dumps({"id": "x", "initial": "idle", "states": {"idle": {}}}), encoding="utf-8"
    )
    monkeypatch.setenv("LOOKUP_MACHINE_PATH", str(custom))
    assert get_machine_path() == custom.resolve()
    assert load_machine()["id"] == "x"


def test_load_machine_rejects_incomplete_config(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"id": "x"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_machine(bad)


@pytest.mark.parametrize(
    "state,event,expected",
    [
        (IDLE, "TRIGGER", SCHEDULED),
        (SCHEDULED, "FIRE", IN_FLIGHT),
        (SCHEDULED, "CANCEL", IDLE),
        (IN_FLIGHT, "RESOLVE", APPLIED),
        (IN_FLIGHT, "FAIL", FAILED),
        (IN_FLIGHT, "TRIGGER", SCHEDULED),
        (APPLIED, "TRIGGER", SCHEDULED),
        (FAILED, "CANCEL", IDLE),
    ],
)
def test_transitions(state, event, expected):
    assert transition(get_machine(), state, event) == expected


def test_no_transition_returns_none():
    machine = get_machine()
    assert transition(machine, IDLE, "RESOLVE") is None
    assert transition(machine, SCHEDULED, "TRIGGER") is None


def test_each_config_gets_its_own_machine():
    for target in ("alpha", "beta", "gamma", "delta"):
        config = {
            "id": "custom",
            "initial": "idle",
            "states": {"idle": {"on": {"GO": target}}, target: {}},
        }
        assert transition(config, "idle", "GO") == target
        # Release the dict so the next one may reuse its id.
        del config
