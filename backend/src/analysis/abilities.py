from collections.abc import Mapping
from typing import Dict, List, Optional

from analysis.base import (
    BaseAnalyzer,
    Importance,
    Statistic,
    Suggestion,
    Thresholds,
    make_suggestion,
)
from analysis.errors import InvalidConfigError
from analysis.events import Event, EventType, Relation
from analysis.spells import SPELLS_BY_ID, SpellCategory, SpellInfo
from analysis.trackers import max_casts


class AbilityCatalog(Mapping):
    """Read-only lookup of static spell data by spell id"""

    def __init__(self, spells: Dict[int, SpellInfo]):
        self._spells = dict(spells)

    def __getitem__(self, spell_id) -> SpellInfo:
        return self._spells[spell_id]

    def __iter__(self):
        return iter(self._spells)

    def __len__(self):
        return len(self._spells)

    def with_report_abilities(self, abilities):
        """Adds the spells a report knows about that the static data doesn't"""
        spells = dict(self._spells)
        for ability in abilities:
            spell_id = ability.get("gameID")
            if spell_id is None or spell_id in spells:
                continue
            spells[spell_id] = SpellInfo(spell_id, ability.get("name"), ability.get("icon"))
        return AbilityCatalog(spells)


def default_catalog():
    return AbilityCatalog(SPELLS_BY_ID)


class CastEfficiency:
    DEFAULT_RECOMMENDED = 0.8
    AVERAGE_DOWNSTEP = 0.05
    MAJOR_DOWNSTEP = 0.15

    def __init__(
        self,
        suggestion=False,
        recommended=None,
        average_issue=None,
        major_issue=None,
        importance: Optional[Importance] = None,
        extra_suggestion=None,
    ):
        self.suggestion = suggestion
        self.recommended = self.DEFAULT_RECOMMENDED if recommended is None else recommended
        self.average_issue = (
            self.recommended - self.AVERAGE_DOWNSTEP
            if average_issue is None
            else average_issue
        )
        self.major_issue = (
            self.recommended - self.MAJOR_DOWNSTEP if major_issue is None else major_issue
        )
        self.importance = importance
        self.extra_suggestion = extra_suggestion

    @property
    def thresholds(self):
        return Thresholds(
            minor=self.recommended,
            average=self.average_issue,
            major=self.major_issue,
        )


class Ability:
    def __init__(
        self,
        spell,
        category: SpellCategory,
        cooldown=None,
        enabled=True,
        gcd=None,
        buff_spell_id=None,
        cast_efficiency: Optional[CastEfficiency] = None,
    ):
        spells = spell if isinstance(spell, (list, tuple)) else [spell]
        self.spell_ids = tuple(
            spell.id if isinstance(spell, SpellInfo) else spell for spell in spells
        )
        self.category = category
        # seconds; falls back to the catalog's cooldown when not set
        self.cooldown = cooldown
        self.cooldown_ms = None
        self.enabled = enabled
        self.gcd_ms = gcd
        self.buff_spell_id = buff_spell_id
        self.cast_efficiency = cast_efficiency or CastEfficiency()
        self.name = None
        self.icon = None

    @property
    def primary_spell_id(self):
        return self.spell_ids[0]

    def resolve(self, catalog: AbilityCatalog):
        if not self.spell_ids:
            raise InvalidConfigError("Spellbook entry without a spell")

        for spell_id in self.spell_ids:
            if spell_id not in catalog:
                raise InvalidConfigError(f"Spellbook entry for unknown spell {spell_id}")

        info = catalog[self.primary_spell_id]
        self.name = info.name
        self.icon = info.icon
        if self.cooldown is not None:
            self.cooldown_ms = int(self.cooldown * 1000)
        else:
            self.cooldown_ms = info.cooldown_ms

        if self.cooldown_ms is not None and self.cooldown_ms <= 0:
            raise InvalidConfigError(
                f"{self.name} has an invalid cooldown of {self.cooldown_ms}ms"
            )
        if self.cast_efficiency.suggestion and self.cooldown_ms is None:
            raise InvalidConfigError(
                f"{self.name} suggests cast efficiency but has no cooldown"
            )
        efficiency = self.cast_efficiency
        if not efficiency.major_issue <= efficiency.average_issue <= efficiency.recommended:
            raise InvalidConfigError(
                f"{self.name} has cast efficiency thresholds out of order"
            )
        return self

    def __repr__(self):
        return f"Ability({self.name or self.primary_spell_id!r}, enabled={self.enabled})"


class Abilities(BaseAnalyzer):
    """The player's spellbook, feeding casts into the cast efficiency tracker"""

    NAME = "Abilities"

    def __init__(self, context, **dependencies):
        super().__init__(context, **dependencies)
        self._abilities: List[Ability] = []
        self._abilities_by_spell: Dict[int, Ability] = {}

        for ability in self.spellbook():
            ability.resolve(context.catalog)
            self._abilities.append(ability)
            if not ability.enabled:
                continue
            for spell_id in ability.spell_ids:
                if spell_id in self._abilities_by_spell:
                    raise InvalidConfigError(f"Spell {spell_id} is in the spellbook twice")
                self._abilities_by_spell[spell_id] = ability

        self.add_handler(EventType.CAST, Relation.BY_PLAYER, self.on_cast)

    def spellbook(self) -> List[Ability]:
        return []

    @property
    def abilities(self):
        return list(self._abilities)

    @property
    def enabled_abilities(self):
        return [ability for ability in self._abilities if ability.enabled]

    def get_ability(self, spell_id) -> Optional[Ability]:
        return self._abilities_by_spell.get(spell_id)

    def effective_cooldown(self, ability: Ability, event: Event):
        return ability.cooldown_ms

    def on_cast(self, event: Event):
        ability = self.get_ability(event.spell_id)
        if ability is None:
            return

        self.casts.on_cast(
            ability.primary_spell_id,
            self.selected_combatant.id,
            event.timestamp,
            self.effective_cooldown(ability, event),
            base_cooldown_ms=ability.cooldown_ms,
        )

    def by_category(self):
        """Enabled abilities grouped by spell category, in spellbook order"""
        categories: Dict[str, List[dict]] = {}
        for ability in self.enabled_abilities:
            categories.setdefault(ability.category.value, []).append(
                {
                    "spell_id": ability.primary_spell_id,
                    "name": ability.name,
                    "casts": self.casts.casts(
                        ability.primary_spell_id, self.selected_combatant.id
                    ),
                    "gcd_ms": ability.gcd_ms,
                    "buff_spell_id": ability.buff_spell_id,
                }
            )
        return categories

    def report(self):
        return {
            "abilities": {
                "num_enabled": len(self.enabled_abilities),
                "num_tracked": len(self._abilities),
                "by_category": self.by_category(),
            }
        }


class CastEfficiencyAnalyzer(BaseAnalyzer):
    DEPENDENCIES = {"abilities": "Abilities"}

    def _tracked_abilities(self):
        return [
            ability
            for ability in self.abilities.enabled_abilities
            if ability.cooldown_ms is not None
        ]

    def get_cast_efficiency(self, ability: Ability):
        player_id = self.selected_combatant.id
        record = self.casts.get_record(ability.primary_spell_id, player_id)
        return {
            "spell_id": ability.primary_spell_id,
            "name": ability.name,
            "icon": ability.icon,
            "category": ability.category.value,
            "buff_spell_id": ability.buff_spell_id,
            "casts": record.casts if record else 0,
            "counted_casts": record.counted_casts if record else 0,
            "max_casts": max_casts(self.fight.duration, ability.cooldown_ms),
            "efficiency": self.casts.get_efficiency(
                ability.primary_spell_id,
                player_id,
                self.fight.duration,
                cooldown_ms=ability.cooldown_ms,
            ),
        }

    def suggestions(self) -> List[Suggestion]:
        suggestions = []

        for ability in self._tracked_abilities():
            config = ability.cast_efficiency
            if not config.suggestion:
                continue

            data = self.get_cast_efficiency(ability)
            text = (
                f"Try to cast {ability.name} more often. You cast it "
                f"{data['counted_casts']} of {data['max_casts']} possible times."
            )
            if config.extra_suggestion:
                text = f"{text} {config.extra_suggestion}"

            suggestion = make_suggestion(
                text, data["efficiency"], config.thresholds, spell_id=data["spell_id"]
            )
            if suggestion is None:
                continue
            if config.importance is not None:
                suggestion = suggestion.model_copy(update={"importance": config.importance})
            suggestions.append(suggestion)
        return suggestions

    def statistics(self) -> List[Statistic]:
        statistics = []

        for ability in self._tracked_abilities():
            data = self.get_cast_efficiency(ability)
            statistics.append(
                Statistic(
                    label=f"{ability.name} cast efficiency",
                    value=data["efficiency"],
                    tooltip=f"{data['counted_casts']} of {data['max_casts']} possible casts",
                )
            )
        return statistics

    def score(self):
        scores = []
        for ability in self._tracked_abilities():
            if not ability.cast_efficiency.suggestion:
                continue
            efficiency = self.get_cast_efficiency(ability)["efficiency"]
            recommended = ability.cast_efficiency.recommended
            scores.append(min(1, efficiency / recommended) if recommended else 1)
        if not scores:
            return None
        return sum(scores) / len(scores)

    def report(self):
        return {
            "cast_efficiency": [
                self.get_cast_efficiency(ability) for ability in self._tracked_abilities()
            ]
        }
