from typing import Tuple, List, Dict
import pandas as pd

import granary.config as cfg
from granary.audit import audit_market
from granary.firm import Firm
from granary.initialize import initialize_world


def simulate(days: int | None = None, seed: int | None = None) -> Tuple[pd.DataFrame, List[Firm], pd.DataFrame]:
    """
    Run the village against the market for `days` simulated days.

    Returns:
        df_market: one row per good per day (market.history)
        firms: farms and bakeries, each with its own .history
        df_village: one row per day with household food outcomes
    """
    days = cfg.DAYS if days is None else days

    market, calendar, firms, population = initialize_world(seed=cfg.SEED if seed is None else seed)

    village_records: List[Dict] = []

    # MAIN LOOP – agents act at the start of the day, the market closes it out
    for _ in range(days):
        day = calendar.day

        for f in firms:
            f.step_day(market, day)
        rec = population.step_day(market)

        # last tick of the day fires market.on_day_changed
        for _ in range(calendar.ticks_per_day):
            calendar.advance()

        audit_market(market)

        rec["day"] = calendar.day
        rec["market_money"] = market.money
        rec["household_money"] = sum(h.wallet.balance for h in population.households)
        rec["firm_money"] = sum(f.wallet.balance for f in firms)
        village_records.append(rec)

    df_village = pd.DataFrame.from_records(village_records)
    return market.history, firms, df_village
