from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from analysis.errors import InvalidLogError


class EventType(str, Enum):
    ANY = "event"
    CAST = "cast"
    BEGINCAST = "begincast"
    DAMAGE = "damage"
    HEAL = "heal"
    ABSORBED = "absorbed"
    APPLYBUFF = "applybuff"
    APPLYBUFFSTACK = "applybuffstack"
    REMOVEBUFF = "removebuff"
    REMOVEBUFFSTACK = "removebuffstack"
    REFRESHBUFF = "refreshbuff"
    APPLYDEBUFF = "applydebuff"
    APPLYDEBUFFSTACK = "applydebuffstack"
    REMOVEDEBUFF = "removedebuff"
    REMOVEDEBUFFSTACK = "removedebuffstack"
    REFRESHDEBUFF = "refreshdebuff"
    ENERGIZE = "energize"
    DEATH = "death"
    SUMMON = "summon"
    COMBATANTINFO = "combatantinfo"
    FIGHTEND = "fightend"


class Relation(str, Enum):
    ANY = "any"
    BY_PLAYER = "by_player"
    BY_PLAYER_PET = "by_player_pet"
    TO_PLAYER = "to_player"
    TO_PLAYER_PET = "to_player_pet"
    NOT_BY_PLAYER = "not_by_player"
    NOT_TO_PLAYER = "not_to_player"


class EventAbility(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    guid: int
    name: Optional[str] = None
    type: Optional[int] = None
    abilityIcon: Optional[str] = None


class Event(BaseModel):
    """A single combat log event.

    Only the fields the engine reads are declared; everything else in the raw
    record (amount, resourceChange, hitPoints, ...) is kept as an extra
    attribute. Events are frozen, fabrication always produces a new instance.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    timestamp: int
    type: str
    source_id: Optional[int] = Field(default=None, alias="sourceID")
    target_id: Optional[int] = Field(default=None, alias="targetID")
    ability: Optional[EventAbility] = None
    relations: FrozenSet[Relation] = frozenset()
    fabricated: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_ability(cls, data):
        # v2 API events carry a flat abilityGameID instead of an ability object
        if isinstance(data, dict) and "ability" not in data and "abilityGameID" in data:
            data = dict(data)
            data["ability"] = {"guid": data["abilityGameID"]}
        return data

    @property
    def spell_id(self):
        return self.ability.guid if self.ability else None

    @property
    def ability_name(self):
        return self.ability.name if self.ability else None

    def get(self, key, default=None):
        return (self.model_extra or {}).get(key, default)

    def has_relation(self, relation: Relation):
        return relation == Relation.ANY or relation in self.relations


def get_relations(event: Event, fight) -> FrozenSet[Relation]:
    player_id = fight.source.id
    pets = fight.source.pets

    relations = set()
    if event.source_id == player_id:
        relations.add(Relation.BY_PLAYER)
    else:
        relations.add(Relation.NOT_BY_PLAYER)
    if event.source_id is not None and event.source_id in pets:
        relations.add(Relation.BY_PLAYER_PET)

    if event.target_id == player_id:
        relations.add(Relation.TO_PLAYER)
    else:
        relations.add(Relation.NOT_TO_PLAYER)
    if event.target_id is not None and event.target_id in pets:
        relations.add(Relation.TO_PLAYER_PET)
    return frozenset(relations)


def tag_event(event: Event, fight) -> Event:
    return event.model_copy(update={"relations": get_relations(event, fight)})


def make_fight_end(fight) -> Event:
    return Event(
        timestamp=fight.end_time,
        type=EventType.FIGHTEND.value,
        relations=frozenset({Relation.NOT_BY_PLAYER, Relation.NOT_TO_PLAYER}),
        fabricated=True,
    )


def parse_events(raw_events):
    events = []

    for i, raw in enumerate(raw_events):
        if isinstance(raw, Event):
            events.append(raw)
            continue
        try:
            events.append(Event.model_validate(raw))
        except ValidationError as e:
            raise InvalidLogError(f"Malformed event at index {i}", cause=e) from e
    return events
