from typing import Dict, List, Optional

from analysis.errors import InvalidLogError, LogNotFoundError
from analysis.events import Event, parse_events


class Encounter:
    def __init__(self, boss_id, name, difficulty=None):
        self.id = boss_id
        self.name = name
        self.difficulty = difficulty


class Combatant:
    """The selected player and everything the log tells us about its setup.

    `active_buffs` is owned by the buff tracker; analyzers only read it.
    """

    def __init__(
        self,
        actor_id,
        name,
        spec_id=None,
        talents=None,
        auras=None,
        gear=None,
        pets=None,
    ):
        self.id = actor_id
        self.name = name
        self.spec_id = spec_id
        self.talents = frozenset(talents or ())
        self.auras = tuple(auras or ())
        self.gear = tuple(gear or ())
        self.pets = frozenset(pets or ())
        self.active_buffs = set()

    @classmethod
    def from_combatant_info(cls, actor, combatant_info, pets=()):
        talents = {
            talent.get("id") if isinstance(talent, dict) else talent
            for talent in combatant_info.get("talents", [])
        }
        auras = [
            aura.get("ability") if isinstance(aura, dict) else aura
            for aura in combatant_info.get("auras", [])
        ]
        return cls(
            actor["id"],
            actor.get("name"),
            spec_id=combatant_info.get("specID"),
            talents={talent for talent in talents if talent is not None},
            auras=[aura for aura in auras if aura is not None],
            gear=combatant_info.get("gear", []),
            pets=pets,
        )

    def has_talent(self, spell_id):
        return spell_id in self.talents

    def has_buff(self, spell_id):
        return spell_id in self.active_buffs

    def __repr__(self):
        return f"Combatant({self.id}, {self.name!r})"


class Fight:
    """Immutable context of one analysis run"""

    def __init__(
        self,
        fight_id,
        start_time,
        end_time,
        encounter: Encounter,
        source: Combatant,
        events: List[Event],
        rankings=None,
    ):
        if end_time < start_time:
            raise InvalidLogError(
                f"Fight {fight_id} ends ({end_time}) before it starts ({start_time})"
            )
        self._id = fight_id
        self._start_time = start_time
        self._end_time = end_time
        self._encounter = encounter
        self._source = source
        self._events = tuple(events)
        self._rankings = rankings or {}

    @property
    def id(self):
        return self._id

    @property
    def start_time(self):
        return self._start_time

    @property
    def end_time(self):
        return self._end_time

    @property
    def duration(self):
        return self._end_time - self._start_time

    @property
    def encounter(self):
        return self._encounter

    @property
    def source(self) -> Combatant:
        return self._source

    @property
    def events(self):
        return self._events

    @property
    def rankings(self):
        return self._rankings


class Report:
    def __init__(
        self,
        report_id,
        source_id,
        events,
        fights,
        actors,
        combatant_info=None,
        abilities=None,
        rankings=None,
        end_time=None,
    ):
        self.report_id = report_id
        self._source_id = source_id
        self._events = list(events)
        self._fights = list(fights)
        self._actors = list(actors)
        self._combatant_info = combatant_info or {}
        self._abilities = abilities or []
        self._rankings = rankings or {}
        self._end_time = end_time

    @classmethod
    def from_saved_log(cls, log_data):
        metadata = log_data.get("metadata", {})
        try:
            return cls(
                metadata["report_id"],
                metadata["source_id"],
                log_data.get("events", []),
                log_data.get("fights", []),
                log_data.get("actors", []),
                combatant_info=log_data.get("combatant_info"),
                abilities=log_data.get("abilities"),
                rankings=log_data.get("rankings"),
                end_time=metadata.get("end_time"),
            )
        except KeyError as e:
            raise InvalidLogError(f"Saved log is missing {e}", cause=e) from e

    @property
    def abilities(self):
        return list(self._abilities)

    @property
    def end_time(self):
        if self._end_time is not None:
            return self._end_time
        return max((fight["end_time"] for fight in self._fights), default=0)

    def _get_actor(self, actor_id) -> Optional[Dict]:
        for actor in self._actors:
            if actor["id"] == actor_id:
                return actor
        return None

    def _get_pets(self, owner_id):
        return {actor["id"] for actor in self._actors if actor.get("petOwner") == owner_id}

    @property
    def source(self) -> Combatant:
        actor = self._get_actor(self._source_id)
        if actor is None:
            raise LogNotFoundError(
                f"Actor {self._source_id} is not part of report {self.report_id}"
            )
        return Combatant.from_combatant_info(
            actor, self._combatant_info, pets=self._get_pets(self._source_id)
        )

    def _get_fight_data(self, fight_id):
        if fight_id == -1:
            if not self._fights:
                raise LogNotFoundError(f"Report {self.report_id} has no fights")
            return {
                "id": -1,
                "start_time": min(fight["start_time"] for fight in self._fights),
                "end_time": max(fight["end_time"] for fight in self._fights),
                "boss": 0,
                "name": "All fights",
            }
        for fight in self._fights:
            if fight["id"] == fight_id:
                return fight
        raise LogNotFoundError(f"Fight {fight_id} not found in report {self.report_id}")

    def get_fight(self, fight_id) -> Fight:
        data = self._get_fight_data(fight_id)
        encounter = Encounter(data.get("boss", 0), data.get("name"), data.get("difficulty"))
        events = [
            event
            for event in parse_events(self._events)
            if event.timestamp >= data["start_time"]
        ]

        # each call builds a fresh combatant so runs never share buff state
        return Fight(
            data["id"],
            data["start_time"],
            data["end_time"],
            encounter,
            self.source,
            events,
            rankings=self._rankings,
        )

