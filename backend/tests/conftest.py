"""
Pytest configuration and shared fixtures for the test suite.

Fights are built directly from raw event dicts shaped like the Warcraft Logs
events API, for a player with id 1, a pet with id 5 and a boss with id 100.
"""

import json

import pytest

from analysis.abilities import default_catalog
from analysis.base import AnalysisContext
from analysis.events import parse_events
from analysis.trackers import Trackers
from report import Combatant, Encounter, Fight

PLAYER_ID = 1
PET_ID = 5
BOSS_ID = 100


def raw_event(timestamp, event_type, spell_id=None, source=PLAYER_ID, target=PLAYER_ID, **extra):
    event = {
        "timestamp": timestamp,
        "type": event_type,
        "sourceID": source,
        "targetID": target,
        **extra,
    }
    if spell_id is not None:
        event["abilityGameID"] = spell_id
    return event


@pytest.fixture
def make_event():
    return raw_event


@pytest.fixture
def make_combatant():
    def _make(talents=(), auras=(), spec_id=None):
        return Combatant(
            PLAYER_ID,
            "Testplayer",
            spec_id=spec_id,
            talents=talents,
            auras=auras,
            pets={PET_ID},
        )

    return _make


@pytest.fixture
def make_fight(make_combatant):
    def _make(events=(), start_time=0, end_time=10000, combatant=None):
        return Fight(
            1,
            start_time,
            end_time,
            Encounter(2000, "Test Boss"),
            combatant or make_combatant(),
            parse_events(events),
        )

    return _make


@pytest.fixture
def make_context():
    def _make(fight, catalog=None):
        return AnalysisContext(fight, Trackers(fight), catalog or default_catalog())

    return _make


@pytest.fixture
def saved_log():
    """A saved combat log with one 60 second fight"""
    return {
        "metadata": {
            "report_id": "abc123",
            "fight_id": 3,
            "source_id": PLAYER_ID,
            "source_name": "Testplayer",
            "timestamp": "20240101_120000",
            "end_time": 1700000000000,
        },
        "events": [
            raw_event(1000, "cast", 17364),
            raw_event(1000, "damage", 17364, target=BOSS_ID, amount=1500),
            raw_event(2000, "applybuff", 197211),
            raw_event(12000, "cast", 17364),
            raw_event(50000, "removebuff", 197211),
        ],
        "combatant_info": {
            "specID": 263,
            "talents": [{"id": 197211}],
            "auras": [],
            "gear": [],
        },
        "fights": [
            {
                "id": 3,
                "start_time": 0,
                "end_time": 60000,
                "boss": 2000,
                "name": "Test Boss",
            }
        ],
        "abilities": [{"gameID": 999001, "name": "Mystery Spell", "icon": "inv_misc"}],
        "actors": [
            {"id": PLAYER_ID, "name": "Testplayer", "type": "Shaman"},
            {"id": PET_ID, "name": "Spirit Wolf", "petOwner": PLAYER_ID},
            {"id": BOSS_ID, "name": "Test Boss", "type": "NPC"},
        ],
        "rankings": {},
    }


@pytest.fixture
def saved_logs_dir(tmp_path, monkeypatch, saved_log):
    path = tmp_path / f"20240101_120000_abc123_3_{PLAYER_ID}.json"
    path.write_text(json.dumps(saved_log))
    monkeypatch.setenv("SAVED_LOGS_DIR", str(tmp_path))
    return tmp_path
