from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, TYPE_CHECKING

import granary.config as cfg
from granary.wallet import Trader

if TYPE_CHECKING:
    from granary.market import Market


@dataclass
class Household(Trader):
    """Eats bread every day; buys it from the market with a daily stipend."""
    id: int = 0
    income: float = field(default_factory=lambda: cfg.HOUSEHOLD_INCOME)
    hungry_days: int = 0

    def need_today(self, market: Market) -> int:
        return cfg.BREAD_PER_HOUSEHOLD + market.shocks.extra_food_for(self.id)

    def step_day(self, market: Market) -> int:
        self.wallet.credit(self.income)

        need = self.need_today(market)
        short = need - self.holdings['bread']
        if short > 0:
            # last meal gone: buy as a survival purchase
            survival = self.holdings['bread'] == 0 and self.hungry_days > 0
            market.sell_bread_to(self, short, is_survival=survival)

        eaten = min(need, self.holdings['bread'])
        self.holdings['bread'] -= eaten
        self.hungry_days = 0 if eaten >= need else self.hungry_days + 1
        return eaten


@dataclass
class Population:
    households: List[Household]

    @classmethod
    def spawn(cls, n: int) -> "Population":
        return cls(households=[Household(name=f"household-{i}", id=i) for i in range(n)])

    @property
    def size(self) -> int:
        return len(self.households)

    def step_day(self, market: Market) -> Dict[str, int]:
        need = sum(h.need_today(market) for h in self.households)
        eaten = sum(h.step_day(market) for h in self.households)
        hungry = sum(1 for h in self.households if h.hungry_days > 0)
        return {"bread_needed": need, "bread_eaten": eaten, "hungry": hungry}
