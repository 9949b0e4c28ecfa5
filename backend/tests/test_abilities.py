"""
Unit tests for the spellbook and cast efficiency suggestions.
"""

import pytest

from analysis.abilities import (
    Abilities,
    Ability,
    AbilityCatalog,
    CastEfficiency,
    CastEfficiencyAnalyzer,
    default_catalog,
)
from analysis.base import Importance, Thresholds, make_suggestion
from analysis.dispatcher import EventDispatcher
from analysis.errors import InvalidConfigError
from analysis.registry import ModuleRegistry
from analysis.spells import SPELLS, SpellCategory

FERAL_SPIRIT = SPELLS["FERAL_SPIRIT"]
ASTRAL_SHIFT = SPELLS["ASTRAL_SHIFT"]


class ShamanSpellbook(Abilities):
    def spellbook(self):
        return [
            Ability(FERAL_SPIRIT, SpellCategory.COOLDOWNS, cast_efficiency=CastEfficiency(suggestion=True)),
            Ability(
                ASTRAL_SHIFT,
                SpellCategory.DEFENSIVE,
                cast_efficiency=CastEfficiency(
                    suggestion=True,
                    importance=Importance.MINOR,
                    recommended=0.33,
                    average_issue=0.2,
                    major_issue=0.1,
                ),
            ),
            Ability(SPELLS["ROCKBITER"], SpellCategory.ROTATIONAL),
            Ability(SPELLS["WIND_SHEAR"], SpellCategory.UTILITY, enabled=False),
        ]


class TestThresholds:
    def test_importance(self):
        thresholds = Thresholds(minor=0.95, average=0.9, major=0.8)

        assert thresholds.importance_for(0.99) is None
        assert thresholds.importance_for(0.92) == Importance.MINOR
        assert thresholds.importance_for(0.85) == Importance.AVERAGE
        assert thresholds.importance_for(0.5) == Importance.MAJOR

    def test_greater_than(self):
        thresholds = Thresholds(minor=1, average=2, major=3, is_less_than=False)

        assert thresholds.importance_for(0) is None
        assert thresholds.importance_for(4) == Importance.MAJOR

    def test_make_suggestion(self):
        thresholds = Thresholds(minor=0.95, average=0.9, major=0.8)

        assert make_suggestion("Fine", 0.97, thresholds) is None
        suggestion = make_suggestion("Cast more", 0.85, thresholds, spell_id=1)
        assert suggestion.importance == Importance.AVERAGE
        assert suggestion.recommended == 0.95
        assert suggestion.actual == 0.85


class TestCastEfficiency:
    def test_default_thresholds(self):
        config = CastEfficiency()

        assert config.recommended == 0.8
        assert config.average_issue == pytest.approx(0.75)
        assert config.major_issue == pytest.approx(0.65)

    def test_resolve_uses_catalog_cooldown(self):
        ability = Ability(FERAL_SPIRIT, SpellCategory.COOLDOWNS).resolve(default_catalog())

        assert ability.cooldown_ms == 120000
        assert ability.name == "Feral Spirit"

    def test_cooldown_override(self):
        ability = Ability(SPELLS["SHADOWFURY"], SpellCategory.UTILITY, cooldown=45)

        assert ability.resolve(default_catalog()).cooldown_ms == 45000

    def test_zero_cooldown(self):
        with pytest.raises(InvalidConfigError):
            Ability(FERAL_SPIRIT, SpellCategory.COOLDOWNS, cooldown=0).resolve(default_catalog())

    def test_unknown_spell(self):
        with pytest.raises(InvalidConfigError):
            Ability(123456789, SpellCategory.OTHER).resolve(default_catalog())

    def test_suggestion_without_cooldown(self):
        ability = Ability(
            SPELLS["ROCKBITER"],
            SpellCategory.ROTATIONAL,
            cast_efficiency=CastEfficiency(suggestion=True),
        )

        with pytest.raises(InvalidConfigError):
            ability.resolve(default_catalog())

    def test_thresholds_out_of_order(self):
        ability = Ability(
            FERAL_SPIRIT,
            SpellCategory.COOLDOWNS,
            cast_efficiency=CastEfficiency(recommended=0.5, major_issue=0.9),
        )

        with pytest.raises(InvalidConfigError):
            ability.resolve(default_catalog())

    def test_report_abilities_extend_the_catalog(self):
        catalog = AbilityCatalog({FERAL_SPIRIT.id: FERAL_SPIRIT}).with_report_abilities(
            [
                {"gameID": 999001, "name": "Mystery Spell", "icon": "inv_misc"},
                {"gameID": FERAL_SPIRIT.id, "name": "Renamed"},
            ]
        )

        assert catalog[999001].name == "Mystery Spell"
        assert catalog[FERAL_SPIRIT.id].name == "Feral Spirit"
        assert len(catalog) == 2


class TestCastEfficiencyAnalyzer:
    @pytest.fixture
    def analyze_casts(self, make_event, make_fight, make_context):
        def _analyze(timestamps_by_spell, end_time=300000):
            events = sorted(
                (
                    make_event(timestamp, "cast", spell_id)
                    for spell_id, timestamps in timestamps_by_spell.items()
                    for timestamp in timestamps
                ),
                key=lambda event: event["timestamp"],
            )
            fight = make_fight(events, end_time=end_time)
            context = make_context(fight)
            registry = ModuleRegistry([ShamanSpellbook, CastEfficiencyAnalyzer])
            analyzers = registry.build(context)
            EventDispatcher(context, analyzers).dispatch(fight.events)
            return registry.get("CastEfficiencyAnalyzer")

        return _analyze

    def test_efficiency(self, analyze_casts):
        analyzer = analyze_casts({FERAL_SPIRIT.id: [0, 121000, 250000]})

        data = analyzer.get_cast_efficiency(analyzer.abilities.get_ability(FERAL_SPIRIT.id))

        assert data["max_casts"] == 3
        assert data["counted_casts"] == 3
        assert data["efficiency"] == 1

    def test_suggestions(self, analyze_casts):
        analyzer = analyze_casts({FERAL_SPIRIT.id: [0]})

        suggestions = {s.spell_id: s for s in analyzer.suggestions()}

        assert suggestions[FERAL_SPIRIT.id].importance == Importance.MAJOR
        assert "1 of 3 possible times" in suggestions[FERAL_SPIRIT.id].text
        # defensives never go above minor
        assert suggestions[ASTRAL_SHIFT.id].importance == Importance.MINOR
        assert suggestions[ASTRAL_SHIFT.id].actual == 0

    def test_statistics_only_for_abilities_with_cooldowns(self, analyze_casts):
        analyzer = analyze_casts({SPELLS["ROCKBITER"].id: [0, 1000]})

        labels = [s.label for s in analyzer.statistics()]

        assert labels == ["Feral Spirit cast efficiency", "Astral Shift cast efficiency"]

    def test_score(self, analyze_casts):
        analyzer = analyze_casts({FERAL_SPIRIT.id: [0, 121000, 250000], ASTRAL_SHIFT.id: [0]})

        # Feral Spirit is perfect, Astral Shift 1/4 against 0.33 recommended
        assert analyzer.score() == pytest.approx((1 + (0.25 / 0.33)) / 2)

    def test_disabled_abilities_are_ignored(self, analyze_casts):
        analyzer = analyze_casts({SPELLS["WIND_SHEAR"].id: [0]})

        assert analyzer.abilities.get_ability(SPELLS["WIND_SHEAR"].id) is None
        assert analyzer.casts.casts(SPELLS["WIND_SHEAR"].id, 1) == 0

    def test_duplicate_spell(self, make_fight, make_context):
        class Duplicated(Abilities):
            def spellbook(self):
                return [
                    Ability(FERAL_SPIRIT, SpellCategory.COOLDOWNS),
                    Ability(FERAL_SPIRIT, SpellCategory.OTHER),
                ]

        with pytest.raises(InvalidConfigError):
            ModuleRegistry([Duplicated]).build(make_context(make_fight()))
