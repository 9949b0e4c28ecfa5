import logging
from typing import Dict, Optional, Tuple

from analysis.base import Window, clamp_windows, combine_windows
from analysis.errors import InvalidConfigError
from analysis.events import Event, EventType, Relation


class BuffWindows:
    def __init__(self, spell_id, actor_id):
        self.spell_id = spell_id
        self.actor_id = actor_id
        self.num_applications = 0
        self.num_refreshes = 0
        self._windows = []

    @property
    def has_window(self):
        return len(self._windows) > 0

    @property
    def has_active_window(self):
        return self.has_window and self._windows[-1].end is None

    @property
    def active_window(self):
        if not self.has_window:
            return None
        return self._windows[-1]

    @property
    def windows(self):
        return self._windows

    def add_window(self, start, end=None):
        self._windows.append(Window(start, end))


class BuffTracker:
    """Tracks buff (or debuff) windows per (spell, actor).

    At most one window per pair is open at a time. Open windows are never
    closed by the end of the fight; they are evaluated against the fight end
    (or the latest timestamp seen, mid-run) whenever uptime is queried.
    """

    def __init__(self, start_time, end_time, combatants=None):
        self._start_time = start_time
        self._end_time = end_time
        self._now = start_time
        self._fight_ended = False
        self._buff_windows: Dict[Tuple[int, int], BuffWindows] = {}
        self._active = set()
        # actor id -> Combatant whose active_buffs set mirrors this tracker
        self._combatants = combatants or {}

    def _get_buff_windows(self, spell_id, actor_id):
        key = (spell_id, actor_id)
        if key not in self._buff_windows:
            self._buff_windows[key] = BuffWindows(spell_id, actor_id)
        return self._buff_windows[key]

    def _set_active(self, spell_id, actor_id, active):
        combatant = self._combatants.get(actor_id)
        if active:
            self._active.add((spell_id, actor_id))
            if combatant is not None:
                combatant.active_buffs.add(spell_id)
        else:
            self._active.discard((spell_id, actor_id))
            if combatant is not None:
                combatant.active_buffs.discard(spell_id)

    def advance(self, timestamp):
        if not self._fight_ended:
            self._now = max(self._now, min(timestamp, self._end_time))

    def on_apply(self, spell_id, actor_id, timestamp):
        self.advance(timestamp)
        windows = self._get_buff_windows(spell_id, actor_id)

        if windows.has_active_window:
            windows.num_refreshes += 1
            return
        windows.num_applications += 1
        windows.add_window(timestamp)
        self._set_active(spell_id, actor_id, True)

    def on_refresh(self, spell_id, actor_id, timestamp):
        self.advance(timestamp)
        windows = self._get_buff_windows(spell_id, actor_id)

        # If we don't have a window, assume it was there before the log started
        if not windows.has_window:
            windows.add_window(self._start_time)
            self._set_active(spell_id, actor_id, True)
        windows.num_refreshes += 1

    def on_remove(self, spell_id, actor_id, timestamp):
        self.advance(timestamp)
        windows = self._buff_windows.get((spell_id, actor_id))
        if windows is None or not windows.has_active_window:
            return

        windows.active_window.end = min(timestamp, self._end_time)
        self._set_active(spell_id, actor_id, False)

    def add_starting_auras(self, actor_id, spell_ids, timestamp=None):
        start = self._start_time if timestamp is None else timestamp
        for spell_id in spell_ids:
            windows = self._get_buff_windows(spell_id, actor_id)
            if not windows.has_window:
                windows.add_window(start)
                self._set_active(spell_id, actor_id, True)

    def end_fight(self, end_time=None):
        if end_time is not None:
            self._end_time = end_time
        self._now = self._end_time
        self._fight_ended = True

    def has_buff(self, spell_id, actor_id):
        return (spell_id, actor_id) in self._active

    def get_windows(self, spell_id, actor_id):
        """Returns closed copies of the windows, open ones ending now"""
        windows = self._buff_windows.get((spell_id, actor_id))
        if windows is None:
            return []

        end = self._end_time if self._fight_ended else self._now
        return [
            Window(window.start, end if window.end is None else window.end)
            for window in windows.windows
            if window.end is not None or window.start <= end
        ]

    def get_uptime(self, spell_id, actor_id, window_start=None, window_end=None):
        window_start = self._start_time if window_start is None else window_start
        window_end = self._end_time if window_end is None else window_end
        if window_end <= window_start:
            return 0

        windows = clamp_windows(
            self.get_windows(spell_id, actor_id), window_start, window_end
        )
        return sum(window.duration for window in combine_windows(windows))

    def num_applications(self, spell_id, actor_id):
        windows = self._buff_windows.get((spell_id, actor_id))
        return windows.num_applications if windows else 0

    def num_refreshes(self, spell_id, actor_id):
        windows = self._buff_windows.get((spell_id, actor_id))
        return windows.num_refreshes if windows else 0


class CastRecord:
    def __init__(self, spell_id, actor_id):
        self.spell_id = spell_id
        self.actor_id = actor_id
        # cooldown the spell has without resets or reductions
        self.base_cooldown_ms = None
        self.last_cast_time = None
        self.casts = 0
        self.counted_casts = 0

    def __repr__(self):
        return (
            f"CastRecord({self.spell_id}, {self.actor_id}, casts={self.casts}, "
            f"counted={self.counted_casts})"
        )


def max_casts(fight_duration_ms, cooldown_ms):
    if cooldown_ms is None:
        return None
    if cooldown_ms <= 0:
        raise InvalidConfigError(f"Invalid cooldown of {cooldown_ms}ms")
    return fight_duration_ms // cooldown_ms + 1


class CastEfficiencyTracker:
    def __init__(self):
        self._records: Dict[Tuple[int, int], CastRecord] = {}

    def on_cast(
        self, spell_id, actor_id, timestamp, cooldown_ms=None, base_cooldown_ms=None
    ):
        """`cooldown_ms` is the effective cooldown of this cast, None for spells without
        one. `base_cooldown_ms` is what efficiency is measured against; without it the
        longest effective cooldown seen so far is used.
        """
        if cooldown_ms is not None and cooldown_ms < 0:
            raise InvalidConfigError(
                f"Negative cooldown of {cooldown_ms}ms for spell {spell_id}"
            )

        key = (spell_id, actor_id)
        record = self._records.get(key)
        if record is None:
            record = self._records[key] = CastRecord(spell_id, actor_id)

        if (
            record.last_cast_time is None
            or cooldown_ms is None
            or timestamp - record.last_cast_time >= cooldown_ms
        ):
            record.counted_casts += 1
        else:
            logging.debug(
                f"Cast of {spell_id} at {timestamp} happened before its cooldown "
                f"of {cooldown_ms}ms elapsed, not counting it"
            )

        record.casts += 1
        record.last_cast_time = timestamp
        if base_cooldown_ms is not None:
            record.base_cooldown_ms = base_cooldown_ms
        elif cooldown_ms and (
            record.base_cooldown_ms is None or cooldown_ms > record.base_cooldown_ms
        ):
            record.base_cooldown_ms = cooldown_ms
        return record

    def get_record(self, spell_id, actor_id) -> Optional[CastRecord]:
        return self._records.get((spell_id, actor_id))

    def casts(self, spell_id, actor_id):
        record = self.get_record(spell_id, actor_id)
        return record.casts if record else 0

    def get_efficiency(self, spell_id, actor_id, fight_duration_ms, cooldown_ms=None):
        record = self.get_record(spell_id, actor_id)
        if cooldown_ms is None and record is not None:
            cooldown_ms = record.base_cooldown_ms
        if cooldown_ms is None:
            return None

        possible = max_casts(fight_duration_ms, cooldown_ms)
        actual = record.counted_casts if record else 0
        return actual / possible


class Trackers:
    BUFF_EVENTS = {
        EventType.APPLYBUFF.value: "on_apply",
        EventType.REFRESHBUFF.value: "on_refresh",
        EventType.REMOVEBUFF.value: "on_remove",
    }
    DEBUFF_EVENTS = {
        EventType.APPLYDEBUFF.value: "on_apply",
        EventType.REFRESHDEBUFF.value: "on_refresh",
        EventType.REMOVEDEBUFF.value: "on_remove",
    }
    # only debuffs the player applies, or suffers
    DEBUFF_RELATIONS = frozenset(
        {Relation.BY_PLAYER, Relation.BY_PLAYER_PET, Relation.TO_PLAYER}
    )

    def __init__(self, fight):
        source = fight.source
        self.buffs = BuffTracker(
            fight.start_time, fight.end_time, combatants={source.id: source}
        )
        self.debuffs = BuffTracker(fight.start_time, fight.end_time)
        self.casts = CastEfficiencyTracker()

        if source.auras:
            self.buffs.add_starting_auras(source.id, source.auras)

    def process(self, event: Event):
        if event.type == EventType.FIGHTEND.value:
            self.buffs.end_fight(event.timestamp)
            self.debuffs.end_fight(event.timestamp)
            return

        for tracker, events, relations in (
            (self.buffs, self.BUFF_EVENTS, None),
            (self.debuffs, self.DEBUFF_EVENTS, self.DEBUFF_RELATIONS),
        ):
            method = events.get(event.type)
            if (
                method is None
                or event.spell_id is None
                or event.target_id is None
                or (relations and not relations & event.relations)
            ):
                tracker.advance(event.timestamp)
                continue
            getattr(tracker, method)(event.spell_id, event.target_id, event.timestamp)
