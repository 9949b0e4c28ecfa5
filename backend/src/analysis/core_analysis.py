from typing import List

from analysis.abilities import Abilities, CastEfficiencyAnalyzer
from analysis.base import (
    AnalysisScorer,
    BaseAnalyzer,
    Statistic,
    Suggestion,
    Thresholds,
    make_suggestion,
)
from analysis.events import EventType, Relation
from analysis.registry import ModuleDescriptor


class BuffUptimeAnalyzer(BaseAnalyzer):
    """Uptime of a single buff on the selected player"""

    BUFF_SPELL_ID = None
    BUFF_NAME = None
    # (minor, average, major) thresholds for the uptime suggestion
    UPTIME_THRESHOLDS = None
    STATISTIC_TOOLTIP = None

    def uptime_ms(self):
        return self.buffs.get_uptime(
            self.BUFF_SPELL_ID,
            self.selected_combatant.id,
            self.fight.start_time,
            self.fight.end_time,
        )

    def uptime(self):
        if self.fight.duration <= 0:
            return 0
        return min(1, self.uptime_ms() / self.fight.duration)

    def suggestion_text(self):
        return f"Try to keep {self.BUFF_NAME} up for as much of the fight as possible"

    def suggestions(self) -> List[Suggestion]:
        if self.UPTIME_THRESHOLDS is None:
            return []
        minor, average, major = self.UPTIME_THRESHOLDS
        suggestion = make_suggestion(
            self.suggestion_text(),
            self.uptime(),
            Thresholds(minor=minor, average=average, major=major),
            spell_id=self.BUFF_SPELL_ID,
        )
        return [suggestion] if suggestion else []

    def statistics(self) -> List[Statistic]:
        return [
            Statistic(
                label=f"{self.BUFF_NAME} uptime",
                value=self.uptime(),
                tooltip=self.STATISTIC_TOOLTIP,
            ),
        ]

    def score(self):
        if self.UPTIME_THRESHOLDS is None:
            return self.uptime()
        return min(1, self.uptime() / self.UPTIME_THRESHOLDS[0])

    def report(self):
        return {
            "buff_uptime": {
                self.BUFF_NAME: self.uptime(),
            }
        }


class DeathAnalyzer(BaseAnalyzer):
    def __init__(self, context, **dependencies):
        super().__init__(context, **dependencies)
        self._deaths = []
        self.add_handler(EventType.DEATH, Relation.TO_PLAYER, self.on_death)

    def on_death(self, event):
        self._deaths.append(event.timestamp)

    @property
    def num_deaths(self):
        return len(self._deaths)

    @property
    def first_death(self):
        if not self._deaths:
            return None
        return self._deaths[0] - self.fight.start_time

    def statistics(self):
        if not self._deaths:
            return []
        return [
            Statistic(
                label="Deaths",
                value=self.num_deaths,
                tooltip=f"First death {self.first_death / 1000:.1f} seconds into the fight",
            )
        ]

    def score(self):
        return 0 if self._deaths else 1

    def report(self):
        return {
            "deaths": {
                "num_deaths": self.num_deaths,
                "timestamps": self._deaths,
            }
        }


class CoreAnalysisScorer(AnalysisScorer):
    def get_score_weights(self):
        return {
            CastEfficiencyAnalyzer: {
                "weight": 3,
            },
            DeathAnalyzer: {
                "weight": 1,
            },
        }


class CoreAnalysisConfig:
    show_procs = False

    def get_modules(self):
        return [
            ModuleDescriptor.of(self.get_abilities()),
            ModuleDescriptor.of(CastEfficiencyAnalyzer),
            ModuleDescriptor.of(DeathAnalyzer),
        ]

    def get_abilities(self):
        return Abilities

    def get_scorer(self, context, analyzers):
        return CoreAnalysisScorer(context, analyzers)
