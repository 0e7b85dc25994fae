from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

import numpy as np
import pandas as pd

import granary.config as cfg
import granary.goods as gds
from granary.clearing import ClearingEngine, ClearResult, DailyStats, is_unit_count
from granary.daily import DailyAdjuster
from granary.pricing import PricingEngine
from granary.shocks import ShockGenerator

logger = logging.getLogger(__name__)

_HISTORY_COLS = [
    "day",
    "good",
    "inventory",
    "price_before",
    "price",
    "avg_clearing_price",
    "units_cleared",
    "units_bought",
    "units_sold",
    "units_requested",
    "overflow_units",
    "decay_loss",
    "restock",
    "rule",
    "money",
    "wheat_yield_multiplier",
    "demand_shock",
    "seed_shock",
]


@dataclass(frozen=True)
class GoodSnapshot:
    good: gds.GoodID
    inventory: int
    price: float
    target: int
    floor: float
    ceiling: float
    capacity: int


@dataclass
class Market:
    """
    The village market for wheat, bread and seeds.

    Owns all mutable economic state:
      - money and per-good inventory
      - reference prices (changed at most once per day)
      - daily accumulators and the previous-day inventory snapshot
      - producer hysteresis gates

    Single writer: every public call runs to completion before the next one,
    so no locking is needed.
    """
    configs: Dict[gds.GoodID, gds.GoodConfig] = field(default_factory=gds.default_good_configs)
    rng: np.random.Generator = field(default_factory=lambda: np.random.default_rng(cfg.SEED))
    money: float = field(default_factory=lambda: float(cfg.MARKET_START_MONEY))
    shocks: Optional[ShockGenerator] = None

    day: int = field(init=False, default=0)
    inventory: Dict[gds.GoodID, int] = field(init=False)
    price: Dict[gds.GoodID, float] = field(init=False)
    stats: Dict[gds.GoodID, DailyStats] = field(init=False)
    prev_inventory: Dict[gds.GoodID, int] = field(init=False)
    can_sell: Dict[gds.GoodID, bool] = field(init=False)
    can_produce: Dict[gds.GoodID, bool] = field(init=False)
    last_result: Optional[ClearResult] = field(init=False, default=None, repr=False)

    _rows: List[Dict] = field(default_factory=list, repr=False)
    _cached_df: Optional[pd.DataFrame] = field(default=None, repr=False)

    def __post_init__(self):
        missing = [g for g in gds.GOODS if g not in self.configs]
        if missing:
            raise ValueError(f"missing config for goods: {missing}")
        if not self.money >= 0:
            raise ValueError(f"market money must be >= 0, got {self.money}")

        self.money = float(self.money)
        self.inventory = {g: int(self.configs[g].initial_inventory) for g in gds.GOODS}
        self.price = {g: float(self.configs[g].initial_price) for g in gds.GOODS}
        self.stats = {g: DailyStats() for g in gds.GOODS}
        self.prev_inventory = dict(self.inventory)
        self.can_sell = {g: True for g in gds.GOODS}
        self.can_produce = {g: True for g in gds.GOODS}

        if self.shocks is None:
            # one seeded stream for decay and shocks
            self.shocks = ShockGenerator(rng=self.rng)

        self.pricing = PricingEngine(self.configs)
        self.clearing = ClearingEngine(self.pricing)
        self.adjuster = DailyAdjuster(self.pricing, self.rng)

    # ------------------------------------------------------------------
    # read-only views
    # ------------------------------------------------------------------
    def _known(self, good: gds.GoodID) -> bool:
        if gds.is_known(good):
            return True
        logger.error("unknown good %r", good)
        return False

    def lower_band(self, good: gds.GoodID) -> float:
        if not self._known(good):
            return 0.0
        return self.configs[good].lower_band

    def upper_band(self, good: gds.GoodID) -> float:
        if not self._known(good):
            return 0.0
        return self.configs[good].upper_band

    def bid_price(self, good: gds.GoodID) -> float:
        if not self._known(good):
            return 0.0
        return self.pricing.bid_price(good, self.inventory[good], self.price[good])

    def max_buy_qty(self, good: gds.GoodID) -> int:
        if not self._known(good):
            return 0
        return self.pricing.max_buy_qty(good, self.inventory[good])

    def distress_multiplier(self, good: gds.GoodID) -> float:
        if not self._known(good):
            return 0.0
        c = self.configs[good]
        return self.pricing.distress_multiplier(good, self.inventory[good], c.target)

    def is_saturated(self, good: gds.GoodID) -> bool:
        if not self._known(good):
            return False
        return self.inventory[good] >= self.configs[good].upper_band

    def remaining_capacity(self, good: gds.GoodID) -> int:
        if not self._known(good):
            return 0
        return max(0, self.configs[good].capacity - self.inventory[good])

    def can_producer_sell(self, good: gds.GoodID) -> bool:
        if not self._known(good):
            return False
        return self.can_sell[good] or not self.configs[good].hysteresis.enabled

    def can_producer_produce(self, good: gds.GoodID) -> bool:
        if not self._known(good):
            return False
        return self.can_produce[good] or not self.configs[good].hysteresis.enabled

    def seed_sale_quantity(self, requested: int) -> int:
        return self.shocks.seed_sale_quantity(requested)

    def snapshot(self, good: gds.GoodID) -> Optional[GoodSnapshot]:
        if not self._known(good):
            return None
        c = self.configs[good]
        return GoodSnapshot(
            good=good,
            inventory=self.inventory[good],
            price=self.price[good],
            target=c.target,
            floor=c.floor,
            ceiling=c.ceiling,
            capacity=c.capacity,
        )

    @property
    def history(self) -> pd.DataFrame:
        """One row per good per day; materialized on demand."""
        if self._cached_df is None:
            if self._rows:
                self._cached_df = pd.DataFrame.from_records(self._rows, columns=_HISTORY_COLS)
            else:
                self._cached_df = pd.DataFrame(columns=_HISTORY_COLS)
        return self._cached_df

    # ------------------------------------------------------------------
    # transactions
    # ------------------------------------------------------------------
    def _done(self, res: ClearResult) -> int:
        self.last_result = res
        return res.transacted

    def buy_wheat_from(self, seller, qty: int, min_acceptable_price: Optional[float] = None,
                       is_survival: bool = False) -> int:
        """Market buys wheat from a producer. Returns units transacted."""
        res = self.clearing.clear(self, 'wheat', seller, qty, min_acceptable_price, is_survival)
        return self._done(res)

    def buy_bread_from(self, seller, qty: int, min_acceptable_price: Optional[float] = None,
                       is_survival: bool = False) -> int:
        """
        Market buys bread from a producer.

        A baker keeps its own food reserve back, unless it is selling to
        survive or its production is profit-paused; otherwise it would have
        to buy the same loaves back later.
        """
        exempt = is_survival or bool(getattr(seller, "profit_paused", False))
        if getattr(seller, "produces", None) == 'bread' and not exempt and is_unit_count(qty) and qty > 0:
            holding = int(getattr(seller, "holdings", {}).get('bread', 0))
            sellable = holding - int(getattr(seller, "food_reserve", 0))
            if sellable <= 0:
                logger.info("bread sale held back: seller keeps %d for its own table", holding)
                return self._done(ClearResult(good='bread', requested=qty, stop_reason="guard"))
            qty = min(qty, sellable)
        res = self.clearing.clear(self, 'bread', seller, qty, min_acceptable_price, is_survival)
        return self._done(res)

    def sell_bread_to(self, buyer, qty: int, max_acceptable_price: Optional[float] = None,
                      is_survival: bool = False) -> int:
        """Market sells bread to a consumer. Bakers may only buy back to survive."""
        if getattr(buyer, "produces", None) == 'bread':
            exempt = is_survival or bool(getattr(buyer, "profit_paused", False))
            if not exempt:
                logger.error(
                    "SELF-TRADE GUARD: bread producer %r tried to buy back bread (qty=%s) "
                    "outside survival/profit-pause", getattr(buyer, "name", buyer), qty,
                )
                return self._done(ClearResult(good='bread', requested=0, stop_reason="guard"))
        res = self.clearing.sell(self, 'bread', buyer, qty, max_acceptable_price)
        return self._done(res)

    def sell_wheat_to(self, buyer, qty: int, max_acceptable_price: Optional[float] = None) -> int:
        """Market sells wheat to a miller or baker."""
        res = self.clearing.sell(self, 'wheat', buyer, qty, max_acceptable_price)
        return self._done(res)

    def sell_seeds_to(self, buyer, qty: int, max_acceptable_price: Optional[float] = None) -> int:
        """Market sells seeds to a producer; an active seed shock shrinks the lot."""
        if is_unit_count(qty) and qty > 0:
            available = self.seed_sale_quantity(qty)
            if available < qty:
                logger.info("seed shock: request for %d seeds cut to %d", qty, available)
            qty = available
        res = self.clearing.sell(self, 'seeds', buyer, qty, max_acceptable_price)
        return self._done(res)

    # ------------------------------------------------------------------
    # clock hooks
    # ------------------------------------------------------------------
    def on_tick(self, tick: int) -> None:
        """Band/floor enforcement, run every simulation tick."""
        for g in gds.GOODS:
            c = self.configs[g]
            p = float(np.clip(self.price[g], c.floor, c.ceiling))
            q = int(np.clip(self.inventory[g], 0, c.capacity))
            if p != self.price[g] or q != self.inventory[g]:
                logger.warning("tick %d: %s out of bounds (price=%s inventory=%s), clamped",
                               tick, g, self.price[g], self.inventory[g])
                self.price[g], self.inventory[g] = p, q

    def on_day_changed(self, day: int) -> None:
        """Close out the finished day, then roll the shocks for the new one."""
        rows = self.adjuster.run(self, day)
        self.shocks.on_day_changed(day)
        self.day = int(day)

        for row in rows:
            row["money"] = self.money
            row["wheat_yield_multiplier"] = self.shocks.wheat_yield_multiplier
            row["demand_shock"] = self.shocks.demand_shock_active
            row["seed_shock"] = self.shocks.seed_shock_active
        self._rows.extend(rows)
        self._cached_df = None  # invalidate cache

    def update_gates(self, good: gds.GoodID) -> None:
        """
        Edge-triggered producer gates: close once the store is saturated (at or
        above the upper band), reopen on crossing back below the lower band.
        Inert unless enabled.
        """
        h = self.configs[good].hysteresis
        if not h.enabled:
            return

        inv = self.inventory[good]
        if inv >= self.upper_band(good):
            changed = False
            if h.gate_sell and self.can_sell[good]:
                self.can_sell[good] = False
                changed = True
            if h.gate_produce and self.can_produce[good]:
                self.can_produce[good] = False
                changed = True
            if changed:
                logger.info("%s gates closed at inventory %d (upper band %.1f)",
                            good, inv, self.upper_band(good))
        elif inv < self.lower_band(good):
            if not (self.can_sell[good] and self.can_produce[good]):
                self.can_sell[good] = True
                self.can_produce[good] = True
                logger.info("%s gates reopened at inventory %d (lower band %.1f)",
                            good, inv, self.lower_band(good))
