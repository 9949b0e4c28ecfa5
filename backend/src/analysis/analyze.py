import logging
from typing import Optional

from analysis.abilities import AbilityCatalog, default_catalog
from analysis.affliction_analysis import AfflictionAnalysisConfig
from analysis.base import AnalysisContext, Importance
from analysis.core_analysis import CoreAnalysisConfig
from analysis.dispatcher import EventDispatcher
from analysis.enhancement_analysis import EnhancementAnalysisConfig
from analysis.events import EventType
from analysis.registry import ModuleRegistry
from analysis.spells import SPELLS
from analysis.trackers import Trackers
from report import Fight, Report

IMPORTANCE_ORDER = {
    Importance.MAJOR: 0,
    Importance.AVERAGE: 1,
    Importance.MINOR: 2,
}


class Analyzer:
    SPEC_ANALYSIS_CONFIGS = {
        "Default": CoreAnalysisConfig,
        "Enhancement": EnhancementAnalysisConfig,
        "Affliction": AfflictionAnalysisConfig,
    }
    SPEC_IDS = {
        263: "Enhancement",
        265: "Affliction",
    }
    SPEC_CASTS = {
        "Enhancement": {
            SPELLS["STORMSTRIKE"].id,
            SPELLS["LAVA_LASH"].id,
            SPELLS["FERAL_SPIRIT"].id,
        },
        "Affliction": {
            SPELLS["UNSTABLE_AFFLICTION_CAST"].id,
            SPELLS["AGONY"].id,
            SPELLS["SUMMON_DARKGLARE"].id,
        },
    }

    def __init__(self, fight: Fight, catalog: Optional[AbilityCatalog] = None):
        self._fight = fight
        self._catalog = catalog or default_catalog()
        self.__spec = None
        self._analysis_config = self.SPEC_ANALYSIS_CONFIGS.get(
            self._detect_spec(),
            self.SPEC_ANALYSIS_CONFIGS["Default"],
        )()
        self._analyzers = []

    def _detect_spec(self):
        if not self.__spec:

            def detect():
                spec = self.SPEC_IDS.get(self._fight.source.spec_id)
                if spec:
                    return spec

                source_id = self._fight.source.id
                for event in self._fight.events:
                    if event.type != EventType.CAST.value or event.source_id != source_id:
                        continue
                    for spec, spell_ids in self.SPEC_CASTS.items():
                        if event.spell_id in spell_ids:
                            return spec

                return None

            self.__spec = detect()
        return self.__spec

    @property
    def displayable_events(self):
        """Casts of the selected player, for the timeline"""
        events = []
        source_id = self._fight.source.id

        for event in self._fight.events:
            if (
                event.source_id == source_id
                and event.type == EventType.CAST.value
                and event.ability_name not in ("Melee",)
                and self._fight.start_time <= event.timestamp <= self._fight.end_time
            ):
                events.append(
                    event.model_dump(
                        mode="json", by_alias=True, exclude={"relations", "fabricated"}
                    )
                )

        events.sort(key=lambda x: x["timestamp"])
        return events

    def analyze(self):
        trackers = Trackers(self._fight)
        context = AnalysisContext(self._fight, trackers, self._catalog)
        registry = ModuleRegistry(self._analysis_config.get_modules())
        analyzers = registry.build(context)
        scorer = self._analysis_config.get_scorer(context, analyzers)
        self._analyzers = analyzers

        summary = EventDispatcher(context, analyzers).dispatch(self._fight.events)

        suggestions = []
        statistics = []
        analysis = {}
        for analyzer in analyzers:
            if not analyzer.active:
                continue
            analysis.update(**analyzer.pull("report", {}))
            suggestions.extend(analyzer.pull("collect_suggestions", []))
            statistics.extend(analyzer.pull("collect_statistics", []))
        analysis.update(**scorer.report())

        suggestions.sort(key=lambda s: IMPORTANCE_ORDER[s.importance])
        degraded = [analyzer.name for analyzer in analyzers if analyzer.degraded]
        if degraded:
            logging.warning(f"Analysis finished with degraded analyzers: {degraded}")

        return {
            "fight_metadata": {
                "source": self._fight.source.name,
                "encounter": self._fight.encounter.name,
                "start_time": self._fight.start_time,
                "end_time": self._fight.end_time,
                "duration": self._fight.duration,
                "rankings": self._fight.rankings,
            },
            "analysis": analysis,
            "suggestions": [s.model_dump(mode="json") for s in suggestions],
            "statistics": [s.model_dump(mode="json") for s in statistics],
            "events": self.displayable_events,
            "dispatch": summary.as_dict(),
            "degraded_analyzers": degraded,
            "spec": self._detect_spec(),
            "show_procs": self._analysis_config.show_procs,
        }


def analyze(report: Report, fight_id: int):
    fight = report.get_fight(fight_id)
    catalog = default_catalog().with_report_abilities(report.abilities)
    analyzer = Analyzer(fight, catalog)
    return analyzer.analyze()


if __name__ == "__main__":
    import argparse
    import json

    from console_table import print_analysis

    parser = argparse.ArgumentParser(description="Analyze a saved combat log")
    parser.add_argument("path", help="saved log JSON file")
    parser.add_argument("--fight-id", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    with open(args.path) as f:
        log_data = json.load(f)
    report = Report.from_saved_log(log_data)
    fight_id = args.fight_id
    if fight_id is None:
        fight_id = log_data["metadata"].get("fight_id", -1)
    print_analysis(analyze(report, fight_id))
