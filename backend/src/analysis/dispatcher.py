import logging
from typing import Iterable, List

import sentry_sdk

from analysis.base import AnalysisContext, BaseAnalyzer
from analysis.errors import InvalidConfigError
from analysis.events import Event, make_fight_end, tag_event


class DispatchSummary:
    def __init__(self):
        self.events_dispatched = 0
        self.events_skipped = 0
        self.out_of_order = 0
        self.failures = []

    def as_dict(self):
        return {
            "events_dispatched": self.events_dispatched,
            "events_skipped": self.events_skipped,
            "out_of_order": self.out_of_order,
            "num_failures": len(self.failures),
        }


class EventDispatcher:
    """Replays one fight's events through the trackers and the analyzers.

    Every event is tagged with its relation to the selected player, fed to the
    trackers and then handed to each active analyzer in registry order. A
    single `fightend` event is fabricated after the last raw event.
    """

    def __init__(self, context: AnalysisContext, analyzers: List[BaseAnalyzer]):
        self._context = context
        self._analyzers = analyzers
        self._dispatched = False

    def dispatch(self, events: Iterable[Event]) -> DispatchSummary:
        if self._dispatched:
            raise RuntimeError("Events were already dispatched for this run")
        self._dispatched = True

        fight = self._context.fight
        summary = DispatchSummary()
        last_timestamp = None

        for event in events:
            if event.timestamp > fight.end_time:
                summary.events_skipped += 1
                continue
            if last_timestamp is not None and event.timestamp < last_timestamp:
                logging.warning(
                    f"Event {event.type} at {event.timestamp} is out of order "
                    f"(previous event at {last_timestamp})"
                )
                summary.out_of_order += 1
            last_timestamp = event.timestamp

            self._process(tag_event(event, fight), summary)

        if summary.events_skipped:
            logging.info(
                f"Skipped {summary.events_skipped} events after the end of the fight"
            )

        self._process(make_fight_end(fight), summary)

        for analyzer in self._active_analyzers():
            try:
                analyzer.finish()
            except InvalidConfigError:
                raise
            except Exception as e:
                self._record_failure(analyzer, None, e, summary)

        return summary

    def _active_analyzers(self):
        return [analyzer for analyzer in self._analyzers if analyzer.active]

    def _process(self, event: Event, summary: DispatchSummary):
        self._context.trackers.process(event)
        summary.events_dispatched += 1

        for analyzer in self._active_analyzers():
            for handler in analyzer.handlers_for(event):
                try:
                    handler.callback(event)
                except InvalidConfigError:
                    raise
                except Exception as e:
                    self._record_failure(analyzer, event, e, summary)

    def _record_failure(self, analyzer, event, exception, summary):
        logging.exception(
            f"{analyzer.name} failed to handle "
            f"{event.type if event else 'the end of the fight'}"
        )
        sentry_sdk.capture_exception(exception)
        analyzer.record_error(event, exception)
        summary.failures.append(analyzer.errors[-1])
