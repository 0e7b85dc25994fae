import logging

import pandas as pd
from granary.sim import simulate
from granary.plots import plot_market, plot_village
import granary.config as cfg

if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    df_market, firms, df_village = simulate(days=cfg.DAYS)
    df_market.to_csv("market_history.csv", index=False)
    df_village.to_csv("village_history.csv", index=False)
    plot_market(df_market)
    plot_village(df_village)

    # final snapshot
    last_rows = []
    for f in firms:
        h = f.history
        if len(h) == 0:
            continue
        last = h.iloc[-1]
        last_rows.append({
            "firm": f.name,
            "kind": f.firm_type.value,
            "paused": f.profit_paused,
            "sold_total": int(h["sold"].sum()),
            "revenue_total": round(float(h["revenue"].sum()), 2),
            "cost_total": round(float(h["cost"].sum()), 2),
            "stock_final": int(last["stock"]),
            "balance": round(float(f.wallet.balance), 2),
        })
    df_firms_final = pd.DataFrame(last_rows).sort_values(["kind", "balance"], ascending=[True, False])
    print(df_firms_final.to_string(index=False))
