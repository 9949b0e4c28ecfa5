"""
Tests for the Enhancement shaman analysis.
"""

import pytest

from analysis.analyze import Analyzer
from analysis.base import Importance
from analysis.spells import SPELLS
from conftest import BOSS_ID

FURY_OF_AIR = SPELLS["FURY_OF_AIR_TALENT"].id
STORMSTRIKE = SPELLS["STORMSTRIKE"].id
STORMBRINGER = SPELLS["STORMBRINGER_BUFF"].id


@pytest.fixture
def enhancement_fight(make_fight, make_combatant):
    def _make(events, talents=(FURY_OF_AIR,), end_time=60000):
        return make_fight(
            events,
            end_time=end_time,
            combatant=make_combatant(talents=talents, spec_id=263),
        )

    return _make


class TestFuryOfAir:
    def test_uptime_and_maelstrom(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [
                make_event(1000, "cast", FURY_OF_AIR),
                make_event(2000, "applybuff", FURY_OF_AIR),
                make_event(50000, "removebuff", FURY_OF_AIR),
            ]
        )

        result = Analyzer(fight).analyze()

        fury_of_air = result["analysis"]["fury_of_air"]
        assert fury_of_air["uptime"] == pytest.approx(0.8)
        assert fury_of_air["applications"] == 1
        assert fury_of_air["maelstrom_spent_on_apply"] == 3
        assert fury_of_air["maelstrom_drained"] == 48 * 3

        (suggestion,) = [s for s in result["suggestions"] if s["spell_id"] == FURY_OF_AIR]
        assert suggestion["importance"] == Importance.MAJOR.value
        assert "Fury of Air" in suggestion["text"]

        (statistic,) = [s for s in result["statistics"] if s["label"] == "Fury of Air uptime"]
        assert statistic["value"] == pytest.approx(0.8)

    def test_up_until_the_end(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [
                make_event(0, "applybuff", FURY_OF_AIR),
                # the log keeps going after the boss dies
                make_event(61000, "removebuff", FURY_OF_AIR),
            ]
        )

        result = Analyzer(fight).analyze()

        assert result["analysis"]["fury_of_air"]["uptime"] == 1
        assert not [s for s in result["suggestions"] if s["spell_id"] == FURY_OF_AIR]

    def test_resource_totals_are_independent(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [
                make_event(0, "applybuff", FURY_OF_AIR),
                make_event(10000, "removebuff", FURY_OF_AIR),
                make_event(20000, "applybuff", FURY_OF_AIR),
                make_event(30500, "removebuff", FURY_OF_AIR),
            ]
        )

        fury_of_air = Analyzer(fight).analyze()["analysis"]["fury_of_air"]

        assert fury_of_air["applications"] == 2
        assert fury_of_air["maelstrom_spent_on_apply"] == 6
        assert fury_of_air["maelstrom_drained"] == 20 * 3

    def test_inactive_without_talent(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [make_event(1000, "cast", STORMSTRIKE, target=BOSS_ID)], talents=()
        )

        result = Analyzer(fight).analyze()

        assert result["spec"] == "Enhancement"
        assert "fury_of_air" not in result["analysis"]
        assert not [s for s in result["statistics"] if s["label"] == "Fury of Air uptime"]


class TestEnhancementAbilities:
    def test_stormbringer_resets_stormstrike(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [
                make_event(1000, "cast", STORMSTRIKE, target=BOSS_ID),
                make_event(1500, "applybuff", STORMBRINGER),
                make_event(2000, "cast", STORMSTRIKE, target=BOSS_ID),
                make_event(2000, "removebuff", STORMBRINGER),
                make_event(3000, "cast", STORMSTRIKE, target=BOSS_ID),
            ]
        )

        result = Analyzer(fight).analyze()

        (stormstrike,) = [
            data
            for data in result["analysis"]["cast_efficiency"]
            if data["spell_id"] == STORMSTRIKE
        ]
        assert stormstrike["casts"] == 3
        assert stormstrike["counted_casts"] == 2
        assert stormstrike["max_casts"] == 60000 // 9000 + 1

    def test_feral_spirit_suggestion(self, enhancement_fight, make_event):
        fight = enhancement_fight(
            [make_event(1000, "cast", SPELLS["FERAL_SPIRIT"].id)], end_time=300000
        )

        result = Analyzer(fight).analyze()

        (suggestion,) = [
            s for s in result["suggestions"] if s["spell_id"] == SPELLS["FERAL_SPIRIT"].id
        ]
        assert suggestion["importance"] == Importance.MAJOR.value
        assert suggestion["actual"] == pytest.approx(1 / 3)
        assert suggestion["recommended"] == 0.9

    def test_score(self, enhancement_fight, make_event):
        fight = enhancement_fight([make_event(0, "applybuff", FURY_OF_AIR)])

        score = Analyzer(fight).analyze()["analysis"]["analysis_scores"]["total_score"]

        assert 0 < score <= 1
