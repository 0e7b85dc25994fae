import matplotlib.pyplot as plt


def _groups(df):
    if "good" in df.columns and df["good"].nunique() > 1:
        return [(g, d.sort_values("day")) for g, d in df.groupby("good", sort=False)]
    else:
        return [("all", df.sort_values("day"))]


def _shock_days(df, col):
    if col not in df.columns:
        return []
    return df.loc[df[col].astype(bool), "day"].unique().tolist()


def plot_market(df_market, show: bool = True):
    figs = []
    for label, df in _groups(df_market):
        tag = "" if label == "all" else f" [{label}]"
        seed_days = _shock_days(df, "seed_shock")

        fig = plt.figure()
        plt.plot(df["day"], df["price"], label="Reference price")
        plt.plot(df["day"], df["avg_clearing_price"].astype(float), linestyle="--", label="Avg clearing price")
        for d in seed_days:
            plt.axvline(d, linestyle=":", linewidth=1, alpha=0.3)
        plt.xlabel("Day"); plt.ylabel("Price"); plt.legend(); plt.title(f"Price over time{tag}")
        figs.append(fig)

        fig = plt.figure()
        plt.plot(df["day"], df["inventory"], label="Inventory")
        plt.xlabel("Day"); plt.ylabel("Units"); plt.legend(); plt.title(f"Market inventory{tag}")
        figs.append(fig)

        fig = plt.figure()
        plt.plot(df["day"], df["units_bought"], label="Bought by market")
        plt.plot(df["day"], df["units_sold"], label="Sold by market")
        plt.plot(df["day"], df["overflow_units"], label="Overflow")
        plt.xlabel("Day"); plt.ylabel("Units"); plt.legend(); plt.title(f"Daily volume{tag}")
        figs.append(fig)

    if show:
        plt.show()
    return figs


def plot_village(df_village, show: bool = True):
    fig = plt.figure()
    plt.plot(df_village["day"], df_village["bread_needed"], label="Bread needed")
    plt.plot(df_village["day"], df_village["bread_eaten"], label="Bread eaten")
    plt.plot(df_village["day"], df_village["hungry"], label="Hungry households")
    plt.xlabel("Day"); plt.ylabel("Count"); plt.legend(); plt.grid(True)
    plt.title("Village food security")
    if show:
        plt.show()
    return fig
