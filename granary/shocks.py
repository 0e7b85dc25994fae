from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math

import numpy as np

import granary.config as cfg

logger = logging.getLogger(__name__)


def seasonal_yield(day: int) -> float:
    """Harvest multiplier for wheat plots on `day`, bounded to the configured range."""
    period = cfg.YIELD_PERIOD_DAYS
    phase = math.sin(2.0 * math.pi * (day % period) / period)
    mult = cfg.YIELD_MID + (cfg.YIELD_MAX - cfg.YIELD_MID) * phase
    return float(np.clip(mult, cfg.YIELD_MIN_BOUND, cfg.YIELD_MAX_BOUND))


@dataclass
class ShockGenerator:
    """
    Three independent, bounded daily modifiers:
      - seasonal wheat yield multiplier
      - demand shock (extra bread for a share of consumers)
      - seed shock (reduced seed sales for a random number of days)

    Shocks only perturb quantities; they never touch a price.
    """
    rng: np.random.Generator
    current_day: int = 0
    wheat_yield_multiplier: float = field(init=False)
    demand_shock_active: bool = False
    seed_shock_active: bool = False
    seed_shock_days_left: int = 0
    _demand_salt: int = field(default=0, repr=False)

    def __post_init__(self):
        self.wheat_yield_multiplier = seasonal_yield(self.current_day)

    @property
    def seed_multiplier(self) -> float:
        return cfg.SEED_SHOCK_MULT if self.seed_shock_active else 1.0

    def on_day_changed(self, day: int) -> None:
        self.current_day = int(day)
        self.wheat_yield_multiplier = seasonal_yield(self.current_day)
        self._roll_demand_shock()
        self._roll_seed_shock()

    def _roll_demand_shock(self) -> None:
        was_active = self.demand_shock_active
        self.demand_shock_active = bool(self.rng.random() < cfg.DEMAND_SHOCK_PROB)
        # fresh salt every day so the affected consumers rotate
        self._demand_salt = int(self.rng.integers(0, 2**31 - 1))

        if self.demand_shock_active and not was_active:
            logger.info("day %d: demand shock started (+%d bread for %.0f%% of consumers)",
                        self.current_day, cfg.DEMAND_SHOCK_EXTRA_FOOD, 100 * cfg.DEMAND_SHOCK_FRACTION)
        elif was_active and not self.demand_shock_active:
            logger.info("day %d: demand shock ended", self.current_day)

    def _roll_seed_shock(self) -> None:
        if self.seed_shock_active:
            self.seed_shock_days_left -= 1
            if self.seed_shock_days_left <= 0:
                self.seed_shock_active = False
                self.seed_shock_days_left = 0
                logger.info("day %d: seed shock cleared", self.current_day)
            return

        if self.rng.random() < cfg.SEED_SHOCK_PROB:
            self.seed_shock_active = True
            self.seed_shock_days_left = int(
                self.rng.integers(cfg.SEED_SHOCK_MIN_DAYS, cfg.SEED_SHOCK_MAX_DAYS + 1)
            )
            logger.info("day %d: seed shock started (x%.2f seed sales for %d days)",
                        self.current_day, cfg.SEED_SHOCK_MULT, self.seed_shock_days_left)

    def extra_food_for(self, consumer_id: int) -> int:
        """Extra bread `consumer_id` needs today (0 unless a demand shock hits it)."""
        if not self.demand_shock_active:
            return 0
        bucket = (int(consumer_id) * 2654435761 + self._demand_salt) % 1000
        return cfg.DEMAND_SHOCK_EXTRA_FOOD if bucket < cfg.DEMAND_SHOCK_FRACTION * 1000 else 0

    def seed_sale_quantity(self, requested: int) -> int:
        """Seeds made available for a request; the buyer's wallet plays no part."""
        requested = int(requested)
        if requested <= 0:
            return 0
        if not self.seed_shock_active:
            return requested
        return max(1, math.floor(requested * self.seed_multiplier))
