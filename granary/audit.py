from __future__ import annotations
from typing import List
import math

import granary.goods as gds
from granary.market import Market


class InvariantViolation(AssertionError):
    pass


def find_violations(market: Market) -> List[str]:
    problems: List[str] = []

    if not math.isfinite(market.money) or market.money < 0:
        problems.append(f"market money is {market.money}")

    for g in gds.GOODS:
        c = market.configs[g]
        inv = market.inventory[g]
        p = market.price[g]
        if inv < 0:
            problems.append(f"{g} inventory negative ({inv})")
        if inv > c.capacity:
            problems.append(f"{g} inventory {inv} above capacity {c.capacity}")
        if not math.isfinite(p) or not c.floor <= p <= c.ceiling:
            problems.append(f"{g} price {p} outside [{c.floor}, {c.ceiling}]")
        s = market.stats[g]
        if min(s.units_offered, s.units_bought, s.units_sold, s.units_requested,
               s.units_cleared, s.overflow_units) < 0 or s.value_cleared < 0:
            problems.append(f"{g} daily accumulators went negative")

    return problems


def audit_market(market: Market) -> None:
    """Raise InvariantViolation if the market is in an impossible state."""
    problems = find_violations(market)
    if problems:
        raise InvariantViolation("; ".join(problems))
