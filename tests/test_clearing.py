"""Micro-fill clearing: conservation, overflow routing, stop conditions, guards."""

import logging
import math

import pytest

from granary.wallet import Trader, Wallet


def test_trade_conserves_money_and_goods(market, make_trader):
    farmer = make_trader(wheat=10)
    money0, wallet0, stock0 = market.money, farmer.balance, market.inventory["wheat"]

    n = market.buy_wheat_from(farmer, 10)

    assert 0 < n <= 10
    assert market.money - money0 == pytest.approx(-(farmer.balance - wallet0))
    assert market.inventory["wheat"] - stock0 == market.last_result.stored == n
    assert farmer.holdings["wheat"] == 10 - n


def test_bid_moves_within_a_single_call(market, make_trader):
    farmer = make_trader(wheat=30)
    market.buy_wheat_from(farmer, 30)
    res = market.last_result
    assert res.transacted == 30
    assert res.price_after < res.price_before
    # units were paid at different prices, all at most the opening bid
    assert res.avg_price < res.price_before


def test_overflow_units_take_distress_price_and_store_caps(market, make_trader):
    market.inventory["bread"] = 190
    seller = make_trader(bread=20)

    n = market.buy_bread_from(seller, 20)
    res = market.last_result

    assert n == 20
    assert res.stored == 10
    assert res.overflow == 10
    assert market.inventory["bread"] == 200

    floor = market.configs["bread"].floor
    distress = 0.8 * math.exp(-0.5 * (200 / 50 - 1))
    # bid is pinned to the floor this deep above the band
    assert res.value == pytest.approx(10 * floor + 10 * floor * distress)
    assert floor * distress < floor
    assert seller.balance == pytest.approx(res.value)


def test_overflow_units_count_toward_clearing_stats(market, make_trader):
    market.inventory["bread"] = 190
    market.buy_bread_from(make_trader(bread=20), 20)
    stats = market.stats["bread"]
    assert stats.units_cleared == 20
    assert stats.overflow_units == 10
    assert stats.avg_clearing_price < market.configs["bread"].floor


def test_seller_walks_away_below_minimum(market, make_trader):
    farmer = make_trader(wheat=5)
    # bid at target is 0.975 x reference
    assert market.buy_wheat_from(farmer, 5, min_acceptable_price=1.0) == 0
    assert market.last_result.stop_reason == "walk_away"
    assert farmer.holdings["wheat"] == 5


def test_walk_away_mid_fill(market, make_trader):
    market.inventory["wheat"] = 38  # just under the lower band: small premium
    farmer = make_trader(wheat=5)
    assert market.buy_wheat_from(farmer, 5, min_acceptable_price=1.0) == 1
    assert market.last_result.stop_reason == "walk_away"


def test_market_stops_when_it_cannot_pay(market, make_trader):
    market.money = 2.0
    farmer = make_trader(wheat=10)
    n = market.buy_wheat_from(farmer, 10)
    assert n == 2
    assert market.last_result.stop_reason == "market_funds"
    assert 0 <= market.money < market.bid_price("wheat")


def test_seller_runs_out(market, make_trader):
    farmer = make_trader(wheat=3)
    assert market.buy_wheat_from(farmer, 10) == 3
    assert market.last_result.stop_reason == "seller_empty"
    assert farmer.holdings["wheat"] == 0


def test_per_call_unit_limit(market, make_trader):
    farmer = make_trader(wheat=500)
    assert market.buy_wheat_from(farmer, 150) == 100
    assert market.last_result.stop_reason == "call_limit"


@pytest.mark.parametrize("qty", [0, -3, 2.5, "3", True, None])
def test_bad_quantity_is_rejected(market, make_trader, qty, caplog):
    farmer = make_trader(wheat=5)
    money0 = market.money
    assert market.buy_wheat_from(farmer, qty) == 0
    assert market.money == money0
    assert market.last_result.stop_reason == "invalid"
    assert "rejected" in caplog.text


@pytest.mark.parametrize("qty", [2.5, "3", -1])
def test_bad_quantity_is_rejected_on_every_sale(market, make_trader, qty):
    buyer = make_trader(money=100.0)
    baker = Trader(name="baker", produces="bread", food_reserve=2)
    baker.holdings["bread"] = 5
    stock0 = dict(market.inventory)

    assert market.sell_bread_to(buyer, qty) == 0
    assert market.sell_wheat_to(buyer, qty) == 0
    assert market.sell_seeds_to(buyer, qty) == 0
    assert market.buy_bread_from(baker, qty) == 0
    assert market.last_result.stop_reason == "invalid"
    assert buyer.balance == 100.0
    assert market.inventory == stock0


def test_seller_without_price_floor_sells_everything(market, make_trader):
    farmer = make_trader(wheat=5)
    assert market.buy_wheat_from(farmer, 5, min_acceptable_price=None) == 5
    assert market.last_result.stop_reason == "filled"


def test_unknown_good_is_rejected(market, make_trader, caplog):
    res = market.clearing.clear(market, "rye", make_trader(), 3)
    assert res.transacted == 0
    assert res.stop_reason == "invalid"
    assert "unknown good" in caplog.text


def test_counterparty_without_wallet_is_rejected(market):
    class Cart:
        holdings = {"wheat": 4}

    assert market.buy_wheat_from(Cart(), 4) == 0
    assert market.last_result.stop_reason == "invalid"


def test_survival_sales_stay_out_of_price_discovery(market, make_trader):
    farmer = make_trader(wheat=5)
    assert market.buy_wheat_from(farmer, 5, is_survival=True) == 5
    stats = market.stats["wheat"]
    assert stats.units_bought == 5
    assert stats.units_cleared == 0
    assert stats.value_cleared == 0.0


def test_baker_keeps_food_reserve_when_selling(market):
    baker = Trader(name="baker", produces="bread", food_reserve=2)
    baker.holdings["bread"] = 5
    assert market.buy_bread_from(baker, 5) == 3
    assert baker.holdings["bread"] == 2

    assert market.buy_bread_from(baker, 2) == 0
    assert market.last_result.stop_reason == "guard"


@pytest.mark.parametrize("survival, paused", [(True, False), (False, True)])
def test_baker_may_sell_reserve_when_exempt(market, survival, paused):
    baker = Trader(name="baker", produces="bread", food_reserve=2, profit_paused=paused)
    baker.holdings["bread"] = 5
    assert market.buy_bread_from(baker, 5, is_survival=survival) == 5


def test_baker_cannot_buy_back_bread(market, caplog):
    baker = Trader(name="baker", wallet=Wallet(50.0), produces="bread")
    with caplog.at_level(logging.ERROR):
        assert market.sell_bread_to(baker, 2) == 0
    assert "SELF-TRADE GUARD" in caplog.text
    assert baker.balance == 50.0


def test_starving_baker_may_buy_back(market):
    baker = Trader(name="baker", wallet=Wallet(50.0), produces="bread")
    assert market.sell_bread_to(baker, 1, is_survival=True) == 1
    assert baker.holdings["bread"] == 1


def test_consumer_buys_until_wallet_runs_dry(market, make_trader):
    h = make_trader(money=10.0)
    money0, stock0 = market.money, market.inventory["bread"]

    assert market.sell_bread_to(h, 5) == 3
    assert market.last_result.stop_reason == "buyer_funds"
    assert h.balance == pytest.approx(1.0)
    assert market.money - money0 == pytest.approx(9.0)
    assert market.inventory["bread"] == stock0 - 3
    assert market.stats["bread"].units_sold == 3
    assert market.stats["bread"].units_requested == 5


def test_consumer_walks_away_above_limit(market, make_trader):
    h = make_trader(money=10.0)
    assert market.sell_bread_to(h, 2, max_acceptable_price=2.5) == 0
    assert market.last_result.stop_reason == "walk_away"


def test_market_sells_out(market, make_trader):
    market.inventory["bread"] = 2
    h = make_trader(money=100.0)
    assert market.sell_bread_to(h, 5) == 2
    assert market.last_result.stop_reason == "market_empty"
    assert market.inventory["bread"] == 0


def test_seed_shock_cuts_lot_regardless_of_wallet(market, make_trader):
    market.shocks.seed_shock_active = True
    assert market.seed_sale_quantity(20) == max(1, math.floor(20 * 0.5)) == 10

    broke = make_trader(money=0.0)
    assert market.seed_sale_quantity(20) == 10
    assert market.sell_seeds_to(broke, 20) == 0

    rich = make_trader(money=100.0)
    assert market.sell_seeds_to(rich, 20) == 10
    assert rich.holdings["seeds"] == 10


def test_seed_sales_without_shock(market, make_trader):
    rich = make_trader(money=100.0)
    assert market.sell_seeds_to(rich, 20) == 20


def test_market_sells_wheat_to_miller(market, make_trader):
    miller = make_trader(money=5.0)
    assert market.sell_wheat_to(miller, 3) == 3
    assert miller.balance == pytest.approx(2.0)
    # sales never feed price discovery
    assert market.stats["wheat"].units_cleared == 0
