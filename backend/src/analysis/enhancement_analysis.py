from analysis.abilities import Abilities, Ability, CastEfficiency
from analysis.base import Importance
from analysis.core_analysis import (
    BuffUptimeAnalyzer,
    CoreAnalysisConfig,
    CoreAnalysisScorer,
)
from analysis.events import EventType, Relation
from analysis.registry import ModuleDescriptor
from analysis.spells import SPELLS, SpellCategory

FURY_OF_AIR = SPELLS["FURY_OF_AIR_TALENT"]


class FuryOfAirAnalyzer(BuffUptimeAnalyzer):
    """Fury of Air uptime and the maelstrom it cost.

    Maelstrom spent on applications and maelstrom drained while the buff was up
    are separate totals; neither is derived from the other.
    """

    BUFF_SPELL_ID = FURY_OF_AIR.id
    BUFF_NAME = "Fury of Air"
    UPTIME_THRESHOLDS = (0.95, 0.95, 0.90)
    STATISTIC_TOOLTIP = "One of your highest priorities, get as close to 100% as possible"

    def __init__(self, context, **dependencies):
        super().__init__(context, **dependencies)
        self.active = self.selected_combatant.has_talent(FURY_OF_AIR.id)
        self._maelstrom_cost = context.catalog[FURY_OF_AIR.id].get_cost("maelstrom") or 0
        self.applications = 0
        self.maelstrom_spent_on_apply = 0

        self.add_handler(
            EventType.APPLYBUFF,
            Relation.BY_PLAYER,
            self.on_apply,
            spell_id=FURY_OF_AIR.id,
        )

    def on_apply(self, event):
        self.applications += 1
        self.maelstrom_spent_on_apply += self._maelstrom_cost

    @property
    def maelstrom_drained(self):
        # drains every full second it is up
        return (self.uptime_ms() // 1000) * self._maelstrom_cost

    def suggestion_text(self):
        return (
            "Try to make sure the Fury of Air is always up, when it drops you "
            "should refresh it as soon as possible"
        )

    def report(self):
        return {
            "fury_of_air": {
                "uptime": self.uptime(),
                "applications": self.applications,
                "maelstrom_spent_on_apply": self.maelstrom_spent_on_apply,
                "maelstrom_drained": self.maelstrom_drained,
            }
        }


class EnhancementAbilities(Abilities):
    def spellbook(self):
        combatant = self.selected_combatant
        return [
            Ability(SPELLS["STORMSTRIKE"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(SPELLS["CRASH_LIGHTNING"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(SPELLS["FLAMETONGUE"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(SPELLS["ROCKBITER"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(SPELLS["LAVA_LASH"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(
                FURY_OF_AIR,
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=combatant.has_talent(FURY_OF_AIR.id),
                buff_spell_id=FURY_OF_AIR.id,
            ),
            Ability(
                SPELLS["FERAL_SPIRIT"],
                SpellCategory.COOLDOWNS,
                gcd=1500,
                cast_efficiency=CastEfficiency(suggestion=True, recommended=0.9),
            ),
            Ability(
                SPELLS["ASCENDANCE_TALENT_ENHANCEMENT"],
                SpellCategory.COOLDOWNS,
                gcd=1500,
                enabled=combatant.has_talent(SPELLS["ASCENDANCE_TALENT_ENHANCEMENT"].id),
                cast_efficiency=CastEfficiency(suggestion=True, recommended=1.0),
            ),
            Ability(
                SPELLS["ASTRAL_SHIFT"],
                SpellCategory.DEFENSIVE,
                cast_efficiency=CastEfficiency(
                    suggestion=True,
                    importance=Importance.MINOR,
                    recommended=0.33,
                    average_issue=0.2,
                    major_issue=0.1,
                ),
            ),
            Ability(SPELLS["WIND_SHEAR"], SpellCategory.UTILITY),
        ]

    def effective_cooldown(self, ability, event):
        # Stormbringer resets Stormstrike
        if ability.primary_spell_id == SPELLS["STORMSTRIKE"].id and (
            self.selected_combatant.has_buff(SPELLS["STORMBRINGER_BUFF"].id)
        ):
            return 0
        return super().effective_cooldown(ability, event)


class EnhancementAnalysisScorer(CoreAnalysisScorer):
    def get_score_weights(self):
        return {
            **super().get_score_weights(),
            FuryOfAirAnalyzer: {
                "weight": 3,
                "exponent_factor": 1.5,
            },
        }


class EnhancementAnalysisConfig(CoreAnalysisConfig):
    show_procs = True

    def get_modules(self):
        return super().get_modules() + [
            ModuleDescriptor.of(FuryOfAirAnalyzer),
        ]

    def get_abilities(self):
        return EnhancementAbilities

    def get_scorer(self, context, analyzers):
        return EnhancementAnalysisScorer(context, analyzers)
