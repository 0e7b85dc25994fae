from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, List, Dict, TYPE_CHECKING
from enum import Enum
import math

import pandas as pd

import granary.config as cfg
from granary.wallet import Trader

if TYPE_CHECKING:
    from granary.market import Market

_HISTORY_COLS = [
    "day",
    "name",
    "kind",
    "produced",
    "sold",
    "bought",
    "revenue",
    "cost",
    "balance",
    "stock",
    "paused",
]


class FirmType(Enum):
    Farm = "farm"
    Bakery = "bakery"


@dataclass
class Firm(Trader):
    """
    A village producer trading with the market through its public API only.
    Decisions are simple threshold rules; the market does the pricing.
    """
    firm_type: FirmType = FirmType.Farm

    _rows: List[Dict] = field(default_factory=list, repr=False)
    _cached_df: Optional[pd.DataFrame] = field(default=None, repr=False)

    @property
    def history(self) -> pd.DataFrame:
        """Materialize if needed, but read-only during simulation."""
        if self._cached_df is None:
            if self._rows:
                self._cached_df = pd.DataFrame.from_records(self._rows, columns=_HISTORY_COLS)
            else:
                self._cached_df = pd.DataFrame(columns=_HISTORY_COLS)
        return self._cached_df

    def _log_day(self, day: int, produced: int, sold: int, bought: int,
                 revenue: float, cost: float, stock: int) -> None:
        self._rows.append({
            "day": day,
            "name": self.name,
            "kind": self.firm_type.value,
            "produced": int(produced),
            "sold": int(sold),
            "bought": int(bought),
            "revenue": float(revenue),
            "cost": float(cost),
            "balance": float(self.wallet.balance),
            "stock": int(stock),
            "paused": bool(self.profit_paused),
        })
        self._cached_df = None  # invalidate cache


@dataclass
class Farm(Firm):
    """Buys seeds, plants them, harvests wheat scaled by the seasonal yield, sells wheat."""
    planted: int = 0

    def __post_init__(self):
        self.firm_type = FirmType.Farm
        self.produces = 'wheat'

    def step_day(self, market: Market, day: int) -> None:
        # 1) harvest yesterday's planting
        harvest = int(math.floor(self.planted * cfg.WHEAT_PER_SEED * market.shocks.wheat_yield_multiplier))
        self.holdings['wheat'] += harvest
        self.planted = 0

        # 2) sell wheat into the market, walking away below seed cost per unit
        sold, revenue = 0, 0.0
        offer = min(self.holdings['wheat'], market.max_buy_qty('wheat'))
        if offer > 0 and market.can_producer_sell('wheat'):
            unit_cost = market.price['seeds'] / cfg.WHEAT_PER_SEED
            before = self.wallet.balance
            sold = market.buy_wheat_from(self, offer, min_acceptable_price=unit_cost)
            revenue = self.wallet.balance - before

        # 3) profitability check before buying seeds for tomorrow
        expected = market.bid_price('wheat') * cfg.WHEAT_PER_SEED
        self.profit_paused = expected <= market.price['seeds']
        bought, cost = 0, 0.0
        if not self.profit_paused and market.can_producer_produce('wheat'):
            before = self.wallet.balance
            bought = market.sell_seeds_to(self, cfg.SEEDS_PER_PLANTING)
            cost = before - self.wallet.balance
        self.planted = self.holdings['seeds']
        self.holdings['seeds'] = 0

        self._log_day(day, harvest, sold, bought, revenue, cost, self.holdings['wheat'])


@dataclass
class Bakery(Firm):
    """Buys wheat, bakes bread, sells bread, and keeps a food reserve for itself."""
    daily_output: int = field(default_factory=lambda: cfg.BAKERY_DAILY_OUTPUT)

    def __post_init__(self):
        self.firm_type = FirmType.Bakery
        self.produces = 'bread'
        if self.food_reserve == 0:
            self.food_reserve = cfg.FOOD_RESERVE

    def step_day(self, market: Market, day: int) -> None:
        # 1) margin check: pause when a loaf no longer covers its wheat
        wheat_cost = market.price['wheat'] * cfg.WHEAT_PER_BREAD
        self.profit_paused = market.bid_price('bread') <= wheat_cost

        # 2) buy wheat for today's batch
        bought, cost = 0, 0.0
        if not self.profit_paused and market.can_producer_produce('bread'):
            need = self.daily_output * cfg.WHEAT_PER_BREAD - self.holdings['wheat']
            if need > 0:
                before = self.wallet.balance
                bought = market.sell_wheat_to(self, need, max_acceptable_price=market.bid_price('bread'))
                cost = before - self.wallet.balance

        # 3) bake
        produced = min(self.daily_output, self.holdings['wheat'] // cfg.WHEAT_PER_BREAD)
        self.holdings['wheat'] -= produced * cfg.WHEAT_PER_BREAD
        self.holdings['bread'] += produced

        # 4) sell what the market will take above wheat cost; reserve stays home
        sold, revenue = 0, 0.0
        offer = min(self.holdings['bread'], market.max_buy_qty('bread'))
        if offer > 0 and market.can_producer_sell('bread'):
            before = self.wallet.balance
            sold = market.buy_bread_from(self, offer, min_acceptable_price=wheat_cost)
            revenue = self.wallet.balance - before

        # 5) eat; buy back only when starving
        if self.holdings['bread'] > 0:
            self.holdings['bread'] -= 1
        elif market.sell_bread_to(self, 1, is_survival=True):
            self.holdings['bread'] -= 1

        self._log_day(day, produced, sold, bought, revenue, cost, self.holdings['bread'])


def spawn_firms(firm_type: FirmType, n: int, start_id: int = 0) -> List[Firm]:
    firms: List[Firm] = []
    for i in range(n):
        if firm_type is FirmType.Farm:
            f = Farm(name=f"farm-{start_id + i}")
            f.wallet.credit(cfg.FARM_START_MONEY)
        else:
            f = Bakery(name=f"bakery-{start_id + i}")
            f.wallet.credit(cfg.BAKERY_START_MONEY)
        firms.append(f)
    return firms
