from __future__ import annotations
from typing import List, Tuple
import numpy as np

import granary.config as cfg
import granary.goods as gds
from granary.clock import Calendar
from granary.firm import Firm, FirmType, spawn_firms
from granary.market import Market
from granary.population import Population
from granary.shocks import ShockGenerator


def initialize_market(seed: int | None = None) -> Market:
    """
    Build a Market with its own seeded RNG stream shared by decay and shocks.
    """
    seed = cfg.SEED if seed is None else seed
    rng = np.random.default_rng(seed)
    return Market(
        configs=gds.default_good_configs(),
        rng=rng,
        shocks=ShockGenerator(rng=rng),
    )


def initialize_world(
    seed: int | None = None,
    n_farms: int | None = None,
    n_bakeries: int | None = None,
    n_households: int | None = None,
) -> Tuple[Market, Calendar, List[Firm], Population]:
    """
    Initialize the Market, the Calendar driving it, and the village around it.

    Returns:
        market: Market instance subscribed to the calendar
        calendar: tick/day source
        firms: farms followed by bakeries
        population: households
    """
    n_farms = cfg.N_FARMS if n_farms is None else n_farms
    n_bakeries = cfg.N_BAKERIES if n_bakeries is None else n_bakeries
    n_households = cfg.N_HOUSEHOLDS if n_households is None else n_households

    market = initialize_market(seed)

    calendar = Calendar(ticks_per_day=cfg.TICKS_PER_DAY)
    calendar.subscribe(on_tick=market.on_tick, on_day_changed=market.on_day_changed)

    firms = spawn_firms(FirmType.Farm, n_farms, start_id=0)
    firms += spawn_firms(FirmType.Bakery, n_bakeries, start_id=0)
    population = Population.spawn(n_households)

    return market, calendar, firms, population
