from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, TYPE_CHECKING
import logging
import math

import numpy as np

import granary.config as cfg
import granary.goods as gds
from granary.pricing import PricingEngine

if TYPE_CHECKING:
    from granary.market import Market

logger = logging.getLogger(__name__)


@dataclass
class DailyAdjuster:
    """
    End-of-day pass over the market, in order:
      1) decay of oversupplied stock
      2) price discovery anchored on the day's clearing prices
      3) hard daily movement cap, then floor/ceiling clamp
      4) hysteresis gates, accumulator reset, inventory snapshot
    """
    pricing: PricingEngine
    rng: np.random.Generator

    def run(self, market: Market, day: int) -> List[Dict]:
        rows: List[Dict] = []
        for good in gds.GOODS:
            row = {"day": int(day), "good": good}

            row["decay_loss"] = self._decay(market, good, day)
            row["restock"] = self._restock(market, good)

            old_price = market.price[good]
            proposed, rule = self._discover_price(market, good)
            new_price = self._cap_move(market, good, old_price, proposed)
            market.price[good] = new_price

            stats = market.stats[good]
            row.update({
                "inventory": market.inventory[good],
                "price_before": old_price,
                "price": new_price,
                "avg_clearing_price": stats.avg_clearing_price,
                "units_cleared": stats.units_cleared,
                "units_bought": stats.units_bought,
                "units_sold": stats.units_sold,
                "units_requested": stats.units_requested,
                "overflow_units": stats.overflow_units,
                "rule": rule,
            })
            logger.debug("day %d %s: price %.3f -> %.3f (%s), inventory=%d",
                         day, good, old_price, new_price, rule, market.inventory[good])

            market.update_gates(good)
            stats.reset()
            market.prev_inventory[good] = market.inventory[good]
            rows.append(row)
        return rows

    # 1) Decay
    def _decay(self, market: Market, good: gds.GoodID, day: int) -> int:
        c = market.configs[good]
        decay = c.decay
        if not (decay.enabled and decay.applies_to_market):
            return 0
        if day <= cfg.DECAY_STABILIZATION_DAYS:
            return 0
        inv = market.inventory[good]
        if inv <= c.upper_band:
            return 0

        rate = float(self.rng.uniform(decay.min_rate, decay.max_rate))
        loss = min(inv, int(math.floor(inv * rate)))
        market.inventory[good] = inv - loss
        if loss:
            logger.info("day %d: %d %s spoiled (rate %.2f%%)", day, loss, good, 100 * rate)
        return loss

    def _restock(self, market: Market, good: gds.GoodID) -> int:
        # seeds come from an outside supplier, topped up toward target
        if good != 'seeds':
            return 0
        c = market.configs[good]
        short = c.target - market.inventory[good]
        add = max(0, min(short, cfg.SEED_RESTOCK_PER_DAY))
        market.inventory[good] += add
        return add

    # 2) Price discovery
    def _discover_price(self, market: Market, good: gds.GoodID) -> tuple[float, str]:
        c = market.configs[good]
        old = market.price[good]
        inv = market.inventory[good]
        stats = market.stats[good]

        if stats.units_cleared < cfg.MIN_TRADES_FOR_DISCOVERY:
            # never raise a price without confirmed demand
            if inv > c.upper_band:
                return old * (1.0 - cfg.NO_TRADE_OVERSUPPLY_CUT), "no_trade_oversupply"
            return old, "hold"

        avg = stats.avg_clearing_price
        price = old + (avg - old) * cfg.ANCHOR_STRENGTH

        deviation = float(np.clip((inv - c.target) / c.target, -1.0, 1.0))
        price *= 1.0 - cfg.INVENTORY_NUDGE * deviation

        if inv > c.upper_band and inv > market.prev_inventory[good]:
            price *= 1.0 - cfg.GROWTH_PENALTY

        return min(price, avg * (1.0 + cfg.MAX_PREMIUM_OVER_CLEARING)), "discovery"

    # 3) Daily cap and clamp
    def _cap_move(self, market: Market, good: gds.GoodID, old: float, proposed: float) -> float:
        c = market.configs[good]
        # the move cap binds last: after a day of heavy overflow a falling
        # price may still sit above avg clearing * (1 + max premium)
        capped = float(np.clip(proposed, old * (1.0 - cfg.MAX_DAILY_MOVE), old * (1.0 + cfg.MAX_DAILY_MOVE)))
        return float(np.clip(capped, c.floor, c.ceiling))
