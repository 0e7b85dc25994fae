from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List

import granary.config as cfg

TickHandler = Callable[[int], None]
DayHandler = Callable[[int], None]


@dataclass
class Calendar:
    """
    Tick source for the simulation loop. Every `ticks_per_day` ticks a day
    boundary fires `on_day_changed(day)` on each subscriber, in subscription
    order, after the tick's own handlers have run.
    """
    ticks_per_day: int = field(default_factory=lambda: cfg.TICKS_PER_DAY)
    tick: int = 0
    day: int = 0
    _tick_handlers: List[TickHandler] = field(default_factory=list, repr=False)
    _day_handlers: List[DayHandler] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.ticks_per_day < 1:
            raise ValueError("ticks_per_day must be >= 1")

    def subscribe(self, on_tick: TickHandler | None = None, on_day_changed: DayHandler | None = None) -> None:
        if on_tick is not None:
            self._tick_handlers.append(on_tick)
        if on_day_changed is not None:
            self._day_handlers.append(on_day_changed)

    def advance(self) -> bool:
        """Advance one tick. Returns True when the tick closed a day."""
        self.tick += 1
        for handler in self._tick_handlers:
            handler(self.tick)

        if self.tick % self.ticks_per_day != 0:
            return False

        self.day = self.tick // self.ticks_per_day
        for handler in self._day_handlers:
            handler(self.day)
        return True
