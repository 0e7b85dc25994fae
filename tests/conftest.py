# tests/conftest.py
"""Shared fixtures: seeded generator, a fresh market, and trader factories."""

import numpy as np
import pytest

import granary.goods as gds
from granary.market import Market
from granary.wallet import Trader, Wallet


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def configs():
    return gds.default_good_configs()


@pytest.fixture
def market(configs, rng):
    return Market(configs=configs, rng=rng)


@pytest.fixture
def make_trader():
    def _make(name="trader", money=0.0, **holdings):
        t = Trader(name=name, wallet=Wallet(money))
        for good, qty in holdings.items():
            t.holdings[good] = qty
        return t
    return _make
