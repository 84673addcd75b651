# timers.py — frame-polled one-shot timers on the pygame tick clock.
# Call scheduler.update() once per frame from the main loop; callbacks run
# on that thread, so they never race the session they touch.
import itertools

import pygame


class TimerHandle:
    def __init__(self, due_ms, seq, callback):
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self):
        return not (self.cancelled or self.fired)

    def cancel(self):
        self.cancelled = True


class Scheduler:
    def __init__(self, clock=None):
        # clock(): milliseconds, monotonic. pygame ticks by default.
        self._clock = clock or pygame.time.get_ticks
        self._timers = []
        self._seq = itertools.count()

    def now(self):
        return self._clock()

    def call_later(self, delay_ms, callback):
        handle = TimerHandle(self._clock() + max(0, int(delay_ms)), next(self._seq), callback)
        self._timers.append(handle)
        return handle

    def pending(self):
        return sum(1 for t in self._timers if t.active)

    def cancel_all(self):
        for t in self._timers:
            t.cancel()
        self._timers = []

    def update(self):
        """Fire every due timer, earliest first. Returns how many fired."""
        now = self._clock()
        due = sorted(
            (t for t in self._timers if t.active and t.due_ms <= now),
            key=lambda t: (t.due_ms, t.seq),
        )
        fired = 0
        for t in due:
            # an earlier callback in this batch may have cancelled it
            if not t.active:
                continue
            t.fired = True
            t.callback()
            fired += 1
        self._timers = [t for t in self._timers if t.active]
        return fired
