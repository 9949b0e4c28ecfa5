import logging
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

import sentry_sdk
from pydantic import BaseModel, ConfigDict

from analysis.errors import HandlerFailure, InvalidConfigError
from analysis.events import Event, EventType, Relation


class Window:
    def __init__(self, start, end=None):
        self.start = start
        self.end = end

    @property
    def duration(self):
        if self.end is None:
            return 0
        return self.end - self.start

    def __repr__(self):
        return f"Window({self.start}, {self.end})"

    def __eq__(self, other):
        if not isinstance(other, Window):
            return NotImplemented
        return self.start == other.start and self.end == other.end


def range_overlap(a, b):
    return max(a[0], b[0]) <= min(a[1], b[1])


def combine_windows(windows):
    """Merge overlapping windows into a sorted, disjoint list"""
    combined = []

    for window in sorted(windows, key=lambda w: w.start):
        if combined and window.start <= combined[-1].end:
            combined[-1].end = max(combined[-1].end, window.end)
        else:
            combined.append(Window(window.start, window.end))
    return combined


def clamp_windows(windows, start, end):
    clamped = []

    for window in windows:
        if not range_overlap((window.start, window.end), (start, end)):
            continue
        clamped.append(Window(max(window.start, start), min(window.end, end)))
    return clamped


class ScoreWeight:
    def __init__(self, score, weight):
        self.score = score
        self.weight = weight

    @staticmethod
    def calculate(*score_weights):
        total_weight = sum(sw.weight for sw in score_weights)
        if not total_weight:
            return 0
        return sum(sw.score * sw.weight for sw in score_weights) / total_weight


class Importance(str, Enum):
    MINOR = "minor"
    AVERAGE = "average"
    MAJOR = "major"


class Thresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    minor: float
    average: float
    major: float
    is_less_than: bool = True

    def importance_for(self, actual) -> Optional[Importance]:
        """Returns how bad `actual` is, or None if it doesn't cross `minor`"""
        if self.is_less_than:
            def crosses(threshold):
                return actual < threshold
        else:
            def crosses(threshold):
                return actual > threshold

        if crosses(self.major):
            return Importance.MAJOR
        if crosses(self.average):
            return Importance.AVERAGE
        if crosses(self.minor):
            return Importance.MINOR
        return None


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    actual: Any
    recommended: Any
    thresholds: Thresholds
    importance: Importance
    spell_id: Optional[int] = None


class Statistic(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: Any = None
    tooltip: Optional[str] = None
    available: bool = True


def make_suggestion(text, actual, thresholds: Thresholds, recommended=None, spell_id=None):
    importance = thresholds.importance_for(actual)
    if importance is None:
        return None
    return Suggestion(
        text=text,
        actual=actual,
        recommended=thresholds.minor if recommended is None else recommended,
        thresholds=thresholds,
        importance=importance,
        spell_id=spell_id,
    )


class AnalysisContext:
    """Read-only state shared by every analyzer of one run"""

    def __init__(self, fight, trackers, catalog):
        self._fight = fight
        self._trackers = trackers
        self._catalog = catalog

    @property
    def fight(self):
        return self._fight

    @property
    def selected_combatant(self):
        return self._fight.source

    @property
    def trackers(self):
        return self._trackers

    @property
    def catalog(self):
        return self._catalog


class Handler(NamedTuple):
    event_type: str
    relation: Relation
    callback: Callable[[Event], None]
    spell_id: Optional[int] = None

    def matches(self, event: Event):
        if self.event_type != EventType.ANY.value and self.event_type != event.type:
            return False
        if self.spell_id is not None and event.spell_id != self.spell_id:
            return False
        return event.has_relation(self.relation)


class BaseAnalyzer:
    NAME: Optional[str] = None
    # attribute name -> name of the analyzer whose state is read
    DEPENDENCIES: Dict[str, str] = {}

    def __init__(self, context: AnalysisContext, **dependencies):
        self.context = context
        self.active = True
        self._handlers: List[Handler] = []
        self._errors: List[HandlerFailure] = []

        for attr, analyzer in dependencies.items():
            setattr(self, attr, analyzer)

    @classmethod
    def get_name(cls):
        return cls.NAME or cls.__name__

    @property
    def name(self):
        return self.get_name()

    @property
    def fight(self):
        return self.context.fight

    @property
    def selected_combatant(self):
        return self.context.selected_combatant

    @property
    def buffs(self):
        return self.context.trackers.buffs

    @property
    def debuffs(self):
        return self.context.trackers.debuffs

    @property
    def casts(self):
        return self.context.trackers.casts

    def add_handler(
        self,
        event_type: Union[EventType, str],
        relation: Relation,
        callback: Callable[[Event], None],
        spell_id: Optional[int] = None,
    ):
        if isinstance(event_type, EventType):
            event_type = event_type.value
        self._handlers.append(Handler(event_type, relation, callback, spell_id))

    def handlers_for(self, event: Event):
        return [handler for handler in self._handlers if handler.matches(event)]

    def record_error(self, event: Optional[Event], exception: Exception):
        self._errors.append(HandlerFailure(self.name, event, exception))

    def pull(self, method, default):
        """Reads results off the analyzer, degrading it if that fails"""
        try:
            return getattr(self, method)()
        except InvalidConfigError:
            raise
        except Exception as e:
            logging.exception(f"{self.name} failed to produce {method}")
            sentry_sdk.capture_exception(e)
            self.record_error(None, e)
            return default

    @property
    def errors(self):
        return list(self._errors)

    @property
    def degraded(self):
        return bool(self._errors)

    def finish(self):
        pass

    def suggestions(self) -> List[Suggestion]:
        return []

    def statistics(self) -> List[Statistic]:
        return []

    def collect_statistics(self) -> List[Statistic]:
        if self.degraded:
            return [
                Statistic(
                    label=self.name,
                    tooltip=f"This statistic is unavailable, {len(self._errors)} "
                    "events could not be analyzed",
                    available=False,
                )
            ]
        return self.statistics()

    def collect_suggestions(self) -> List[Suggestion]:
        if self.degraded:
            return []
        return self.suggestions()

    def score(self):
        return None

    def report(self):
        return {}


class AnalysisScorer(BaseAnalyzer):
    """Weighted average over the scores of the other analyzers.

    Weights are keyed by analyzer class; a weight can be a number or a callable
    taking the analyzer instance.
    """

    def __init__(self, context, analyzers):
        super().__init__(context)
        self._analyzers = analyzers

    def get_score_weights(self):
        return {}

    def score(self):
        weights = self.get_score_weights()
        score_weights = []

        for analyzer in self._analyzers:
            if not analyzer.active or analyzer.degraded:
                continue
            config = weights.get(analyzer.__class__)
            if not config:
                continue
            score = analyzer.pull("score", None)
            if score is None:
                continue
            weight = config["weight"]
            if callable(weight):
                weight = weight(analyzer)
            score = score ** config.get("exponent_factor", 1)
            score_weights.append(ScoreWeight(score, weight))

        return ScoreWeight.calculate(*score_weights)

    def report(self):
        return {
            "analysis_scores": {
                "total_score": self.score(),
            }
        }
