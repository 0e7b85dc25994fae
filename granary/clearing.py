from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, TYPE_CHECKING
import logging
import numbers

import granary.config as cfg
import granary.goods as gds
from granary.pricing import PricingEngine

if TYPE_CHECKING:
    from granary.market import Market

logger = logging.getLogger(__name__)


@dataclass
class DailyStats:
    """Per-good accumulators, reset once per day-change event."""
    units_offered: int = 0      # units sellers offered to the market
    units_bought: int = 0       # units the market bought (stored + overflow)
    units_sold: int = 0         # units the market sold to buyers
    units_requested: int = 0    # units buyers asked the market for
    units_cleared: int = 0      # bought units that count toward price discovery
    value_cleared: float = 0.0
    overflow_units: int = 0

    def reset(self) -> None:
        for name, value in asdict(DailyStats()).items():
            setattr(self, name, value)

    @property
    def avg_clearing_price(self) -> Optional[float]:
        if self.units_cleared <= 0:
            return None
        return self.value_cleared / self.units_cleared


@dataclass
class ClearResult:
    good: gds.GoodID
    requested: int
    transacted: int = 0
    stored: int = 0
    overflow: int = 0
    value: float = 0.0
    price_before: float = 0.0
    price_after: float = 0.0
    stop_reason: str = "filled"

    @property
    def avg_price(self) -> float:
        return self.value / self.transacted if self.transacted else 0.0


def _wallet_of(counterparty):
    return getattr(counterparty, "wallet", None)


def is_unit_count(qty) -> bool:
    """Whole units only; bools and floats are not quantities."""
    return isinstance(qty, numbers.Integral) and not isinstance(qty, bool)


@dataclass
class ClearingEngine:
    """
    Unit-by-unit execution of trades against the market's books.

    The engine owns no state; it reads and writes the market passed in, so
    every call leaves money and inventory consistent before returning.
    """
    pricing: PricingEngine
    max_units_per_call: int = cfg.MAX_UNITS_PER_CALL

    def _rejected(self, good, qty, detail: str) -> ClearResult:
        logger.error("rejected %s request (qty=%s): %s", good, qty, detail)
        return ClearResult(good=good, requested=0, stop_reason="invalid")

    def _validate(self, good, qty, counterparty) -> Optional[ClearResult]:
        if not gds.is_known(good):
            return self._rejected(good, qty, f"unknown good {good!r}")
        if not is_unit_count(qty) or qty <= 0:
            return self._rejected(good, qty, "quantity must be a positive integer")
        if _wallet_of(counterparty) is None or getattr(counterparty, "holdings", None) is None:
            return self._rejected(good, qty, "counterparty has no wallet or holdings")
        return None

    def clear(
        self,
        market: Market,
        good: gds.GoodID,
        counterparty,
        offered_qty: int,
        min_acceptable_price: Optional[float] = None,
        is_survival: bool = False,
    ) -> ClearResult:
        """
        Market buys up to `offered_qty` units of `good` from `counterparty`.

        Each unit is priced at the current bid, which moves as stored
        inventory grows. Units arriving at a full store overflow: they are
        paid for at bid * distress multiplier and not retained.

        Stops early when the seller walks away (ordinary bid below
        `min_acceptable_price`), the market cannot afford the next unit,
        the seller runs out, or the per-call limit is hit.
        """
        invalid = self._validate(good, offered_qty, counterparty)
        if invalid is not None:
            return invalid

        c = market.configs[good]
        stats = market.stats[good]
        wallet = _wallet_of(counterparty)
        holding = int(counterparty.holdings.get(good, 0))
        limit = min(offered_qty, holding, self.max_units_per_call)

        res = ClearResult(
            good=good,
            requested=offered_qty,
            price_before=market.bid_price(good),
        )

        for _ in range(limit):
            inv = market.inventory[good]
            bid = self.pricing.bid_price(good, inv, market.price[good])
            overflow = inv >= c.capacity

            if overflow:
                unit_price = bid * self.pricing.distress_multiplier(good, inv, c.target)
            elif min_acceptable_price is not None and bid < min_acceptable_price:
                res.stop_reason = "walk_away"
                break
            else:
                unit_price = bid

            if market.money < unit_price:
                res.stop_reason = "market_funds"
                break

            # 1) settle money
            market.money -= unit_price
            wallet.credit(unit_price)
            # 2) move the unit
            counterparty.holdings[good] -= 1
            if overflow:
                res.overflow += 1
            else:
                market.inventory[good] += 1
                res.stored += 1
            res.transacted += 1
            res.value += unit_price
        else:
            if limit < offered_qty:
                res.stop_reason = "seller_empty" if limit == holding else "call_limit"

        # 3) daily statistics
        stats.units_offered += offered_qty
        stats.units_bought += res.transacted
        stats.overflow_units += res.overflow
        if not is_survival and res.transacted > 0:
            # overflow units count too: discovery anchors on realized prices
            stats.units_cleared += res.transacted
            stats.value_cleared += res.value

        res.price_after = market.bid_price(good)
        logger.info(
            "market buys %s: offered=%d cleared=%d stored=%d overflow=%d avg=%.3f bid=%.3f->%.3f stop=%s",
            good, offered_qty, res.transacted, res.stored, res.overflow,
            res.avg_price, res.price_before, res.price_after, res.stop_reason,
        )
        return res

    def sell(
        self,
        market: Market,
        good: gds.GoodID,
        counterparty,
        requested_qty: int,
        max_acceptable_price: Optional[float] = None,
    ) -> ClearResult:
        """
        Market sells up to `requested_qty` units of `good` to `counterparty`
        at the reference price, one unit at a time.
        """
        invalid = self._validate(good, requested_qty, counterparty)
        if invalid is not None:
            return invalid

        stats = market.stats[good]
        wallet = _wallet_of(counterparty)
        limit = min(requested_qty, self.max_units_per_call)
        ask = market.price[good]

        res = ClearResult(good=good, requested=requested_qty, price_before=ask)

        for _ in range(limit):
            if market.inventory[good] <= 0:
                res.stop_reason = "market_empty"
                break
            if max_acceptable_price is not None and ask > max_acceptable_price:
                res.stop_reason = "walk_away"
                break
            if not wallet.debit(ask):
                res.stop_reason = "buyer_funds"
                break

            market.money += ask
            market.inventory[good] -= 1
            counterparty.holdings[good] = counterparty.holdings.get(good, 0) + 1
            res.stored += 1
            res.transacted += 1
            res.value += ask
        else:
            if limit < requested_qty:
                res.stop_reason = "call_limit"

        stats.units_requested += requested_qty
        stats.units_sold += res.transacted

        res.price_after = market.price[good]
        logger.info(
            "market sells %s: requested=%d sold=%d avg=%.3f stock_left=%d stop=%s",
            good, requested_qty, res.transacted, res.avg_price,
            market.inventory[good], res.stop_reason,
        )
        return res
