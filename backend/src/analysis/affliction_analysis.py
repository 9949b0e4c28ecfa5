from analysis.abilities import Abilities, Ability, CastEfficiency
from analysis.base import (
    BaseAnalyzer,
    Importance,
    Statistic,
    Thresholds,
    make_suggestion,
)
from analysis.core_analysis import CoreAnalysisConfig, CoreAnalysisScorer
from analysis.events import EventType, Relation
from analysis.registry import ModuleDescriptor
from analysis.spells import SPELLS, SpellCategory

AGONY = SPELLS["AGONY"]


class AgonyUptimeAnalyzer(BaseAnalyzer):
    """Agony uptime on the target the player kept it on the longest"""

    THRESHOLDS = Thresholds(minor=0.95, average=0.9, major=0.8)

    def __init__(self, context, **dependencies):
        super().__init__(context, **dependencies)
        self._targets = set()
        self.add_handler(
            EventType.APPLYDEBUFF, Relation.BY_PLAYER, self.on_apply, spell_id=AGONY.id
        )

    def on_apply(self, event):
        self._targets.add(event.target_id)

    @property
    def num_targets(self):
        return len(self._targets)

    def uptime(self):
        if self.fight.duration <= 0 or not self._targets:
            return 0
        best = max(
            self.debuffs.get_uptime(
                AGONY.id, target, self.fight.start_time, self.fight.end_time
            )
            for target in self._targets
        )
        return min(1, best / self.fight.duration)

    def suggestions(self):
        suggestion = make_suggestion(
            "Your Agony uptime can be improved. Try to pay more attention to your "
            "Agony on the boss, it should never drop off",
            self.uptime(),
            self.THRESHOLDS,
            spell_id=AGONY.id,
        )
        return [suggestion] if suggestion else []

    def statistics(self):
        return [Statistic(label="Agony uptime", value=self.uptime())]

    def score(self):
        return min(1, self.uptime() / self.THRESHOLDS.minor)

    def report(self):
        return {
            "agony": {
                "uptime": self.uptime(),
                "num_targets": self.num_targets,
            }
        }


class AfflictionAbilities(Abilities):
    def spellbook(self):
        combatant = self.selected_combatant

        def talented(name):
            return combatant.has_talent(SPELLS[name].id)

        return [
            Ability(SPELLS["UNSTABLE_AFFLICTION_CAST"], SpellCategory.ROTATIONAL, gcd=1500),
            Ability(
                SPELLS["DEATHBOLT_TALENT"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=talented("DEATHBOLT_TALENT"),
                cast_efficiency=CastEfficiency(suggestion=True, recommended=0.9),
            ),
            Ability(
                SPELLS["HAUNT_TALENT"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=talented("HAUNT_TALENT"),
                buff_spell_id=SPELLS["HAUNT_TALENT"].id,
                cast_efficiency=CastEfficiency(
                    suggestion=True,
                    recommended=0.95,
                    extra_suggestion=(
                        "Haunt resets its cooldown when the target dies, so the "
                        "number of possible casts can be higher on add fights"
                    ),
                ),
            ),
            Ability(AGONY, SpellCategory.ROTATIONAL, gcd=1500, buff_spell_id=AGONY.id),
            Ability(
                SPELLS["CORRUPTION_CAST"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                buff_spell_id=SPELLS["CORRUPTION_DEBUFF"].id,
            ),
            Ability(
                SPELLS["SIPHON_LIFE_TALENT"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=talented("SIPHON_LIFE_TALENT"),
                buff_spell_id=SPELLS["SIPHON_LIFE_TALENT"].id,
            ),
            Ability(
                SPELLS["SHADOW_BOLT_AFFLI"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=not talented("DRAIN_SOUL_TALENT"),
            ),
            Ability(
                SPELLS["DRAIN_SOUL_TALENT"],
                SpellCategory.ROTATIONAL,
                gcd=1500,
                enabled=talented("DRAIN_SOUL_TALENT"),
            ),
            Ability(
                SPELLS["PHANTOM_SINGULARITY_TALENT"],
                SpellCategory.ROTATIONAL_AOE,
                gcd=1500,
                enabled=talented("PHANTOM_SINGULARITY_TALENT"),
                buff_spell_id=SPELLS["PHANTOM_SINGULARITY_TALENT"].id,
            ),
            Ability(
                SPELLS["SEED_OF_CORRUPTION_DEBUFF"], SpellCategory.ROTATIONAL_AOE, gcd=1500
            ),
            Ability(
                SPELLS["VILE_TAINT_TALENT"],
                SpellCategory.ROTATIONAL_AOE,
                gcd=1500,
                enabled=talented("VILE_TAINT_TALENT"),
                buff_spell_id=SPELLS["VILE_TAINT_TALENT"].id,
            ),
            Ability(
                SPELLS["SUMMON_DARKGLARE"],
                SpellCategory.COOLDOWNS,
                gcd=1500,
                cast_efficiency=CastEfficiency(suggestion=True, recommended=0.9),
            ),
            Ability(
                SPELLS["DARK_SOUL_MISERY_TALENT"],
                SpellCategory.COOLDOWNS,
                enabled=talented("DARK_SOUL_MISERY_TALENT"),
                buff_spell_id=SPELLS["DARK_SOUL_MISERY_TALENT"].id,
                cast_efficiency=CastEfficiency(suggestion=True),
            ),
            Ability(
                SPELLS["UNENDING_RESOLVE"],
                SpellCategory.DEFENSIVE,
                buff_spell_id=SPELLS["UNENDING_RESOLVE"].id,
                cast_efficiency=CastEfficiency(
                    suggestion=True,
                    importance=Importance.MINOR,
                    recommended=0.33,
                    average_issue=0.2,
                    major_issue=0.1,
                ),
            ),
            Ability(
                SPELLS["DARK_PACT_TALENT"],
                SpellCategory.DEFENSIVE,
                enabled=talented("DARK_PACT_TALENT"),
                buff_spell_id=SPELLS["DARK_PACT_TALENT"].id,
                cast_efficiency=CastEfficiency(
                    suggestion=True,
                    importance=Importance.MINOR,
                    recommended=0.33,
                    average_issue=0.2,
                    major_issue=0.1,
                ),
            ),
            Ability(
                SPELLS["MORTAL_COIL_TALENT"],
                SpellCategory.UTILITY,
                gcd=1500,
                enabled=talented("MORTAL_COIL_TALENT"),
            ),
            Ability(
                SPELLS["SHADOWFURY"],
                SpellCategory.UTILITY,
                cooldown=45 if talented("DARKFURY_TALENT") else 60,
                gcd=1500,
            ),
            Ability(SPELLS["DEMONIC_GATEWAY_CAST"], SpellCategory.UTILITY, gcd=1500),
            Ability(
                SPELLS["DEMONIC_CIRCLE_SUMMON"],
                SpellCategory.UTILITY,
                gcd=1500,
                enabled=talented("DEMONIC_CIRCLE_TALENT"),
            ),
            Ability(
                SPELLS["DEMONIC_CIRCLE_TELEPORT"],
                SpellCategory.UTILITY,
                gcd=1500,
                enabled=talented("DEMONIC_CIRCLE_TALENT"),
            ),
            Ability(SPELLS["DRAIN_LIFE"], SpellCategory.UTILITY, gcd=1500),
            Ability(
                SPELLS["BURNING_RUSH_TALENT"],
                SpellCategory.UTILITY,
                enabled=talented("BURNING_RUSH_TALENT"),
                buff_spell_id=SPELLS["BURNING_RUSH_TALENT"].id,
            ),
            Ability(
                SPELLS["GRIMOIRE_OF_SACRIFICE_TALENT"],
                SpellCategory.UTILITY,
                gcd=1500,
                enabled=talented("GRIMOIRE_OF_SACRIFICE_TALENT"),
            ),
            Ability(
                [
                    SPELLS["SUMMON_IMP"],
                    SPELLS["SUMMON_VOIDWALKER"],
                    SPELLS["SUMMON_SUCCUBUS"],
                    SPELLS["SUMMON_FELHUNTER"],
                ],
                SpellCategory.UTILITY,
                gcd=1500,
            ),
        ]


class AfflictionAnalysisScorer(CoreAnalysisScorer):
    def get_score_weights(self):
        return {
            **super().get_score_weights(),
            AgonyUptimeAnalyzer: {
                "weight": 3,
            },
        }


class AfflictionAnalysisConfig(CoreAnalysisConfig):
    def get_modules(self):
        return super().get_modules() + [
            ModuleDescriptor.of(AgonyUptimeAnalyzer),
        ]

    def get_abilities(self):
        return AfflictionAbilities

    def get_scorer(self, context, analyzers):
        return AfflictionAnalysisScorer(context, analyzers)
