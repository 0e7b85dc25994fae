"""End-to-end village runs: shape of the outputs, determinism, sane agents."""

import pandas as pd
import pytest

import granary.config as cfg
from granary.firm import Bakery, Farm
from granary.initialize import initialize_world
from granary.population import Population
from granary.sim import simulate


@pytest.fixture(scope="module")
def run():
    return simulate(days=20, seed=3)


def test_outputs_have_one_row_per_day(run):
    df_market, firms, df_village = run
    assert len(df_market) == 20 * 3
    assert len(df_village) == 20
    assert list(df_village["day"]) == list(range(1, 21))
    assert len(firms) == cfg.N_FARMS + cfg.N_BAKERIES
    assert all(len(f.history) == 20 for f in firms)


def test_prices_stay_inside_bounds(run):
    df_market, _, _ = run
    for good, g in df_market.groupby("good"):
        c_floor = getattr(cfg, f"{good.upper()}_PRICE_FLOOR")
        c_ceiling = getattr(cfg, f"{good.upper()}_PRICE_CEILING")
        assert g["price"].between(c_floor, c_ceiling).all()


def test_village_actually_trades(run):
    df_market, firms, df_village = run
    assert df_market["units_bought"].sum() > 0
    assert df_market["units_sold"].sum() > 0
    assert df_village["bread_eaten"].sum() > 0
    assert any(f.history["produced"].sum() > 0 for f in firms if isinstance(f, Farm))
    assert any(f.history["produced"].sum() > 0 for f in firms if isinstance(f, Bakery))


def test_same_seed_same_run(run):
    df_market, _, df_village = run
    df_market2, _, df_village2 = simulate(days=20, seed=3)
    pd.testing.assert_frame_equal(df_market, df_market2)
    pd.testing.assert_frame_equal(df_village, df_village2)


def test_plots_build_without_a_display(run):
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from granary.plots import plot_market, plot_village

    df_market, _, df_village = run
    figs = plot_market(df_market, show=False)
    assert len(figs) == 3 * 3
    assert plot_village(df_village, show=False) is not None
    plt.close("all")


def test_world_is_wired_to_the_calendar():
    market, calendar, firms, population = initialize_world(seed=1, n_farms=2, n_bakeries=1, n_households=5)
    assert isinstance(population, Population) and population.size == 5
    assert [type(f) for f in firms] == [Farm, Farm, Bakery]
    # decay and shocks draw from the same stream
    assert market.shocks.rng is market.rng

    for _ in range(calendar.ticks_per_day):
        calendar.advance()
    assert market.day == 1
    assert len(market.history) == 3
