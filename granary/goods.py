from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict

import granary.config as cfg

GoodID = str
Goods = List[GoodID]

GOODS: Goods = ['wheat', 'bread', 'seeds']

# use set here instead of list to get O(1) instead of O(n)
STORABLE_GOODS = {'wheat', 'seeds'}
PERISHABLE_GOODS = {'bread'}


def is_known(good: GoodID) -> bool:
    return good in GOODS


def is_perishable(good: GoodID) -> bool:
    return good in PERISHABLE_GOODS


@dataclass(frozen=True)
class DecayConfig:
    enabled: bool = False
    min_rate: float = 0.0
    max_rate: float = 0.0
    applies_to_market: bool = True


@dataclass(frozen=True)
class HysteresisConfig:
    # gates exist and are reachable, but permit everything unless enabled
    enabled: bool = False
    gate_sell: bool = True
    gate_produce: bool = True


@dataclass(frozen=True)
class GoodConfig:
    good: GoodID
    initial_price: float
    floor: float
    ceiling: float
    target: int
    capacity: int
    initial_inventory: int
    premium_mult: float
    decay: DecayConfig = field(default_factory=DecayConfig)
    hysteresis: HysteresisConfig = field(default_factory=HysteresisConfig)

    def __post_init__(self):
        if self.floor <= 0 or self.floor > self.ceiling:
            raise ValueError(f"{self.good}: bad price bounds [{self.floor}, {self.ceiling}]")
        if not self.floor <= self.initial_price <= self.ceiling:
            raise ValueError(f"{self.good}: initial price {self.initial_price} outside bounds")
        if self.target <= 0 or self.capacity < self.target:
            raise ValueError(f"{self.good}: capacity {self.capacity} below target {self.target}")
        if not 0 <= self.initial_inventory <= self.capacity:
            raise ValueError(f"{self.good}: initial inventory {self.initial_inventory} outside [0, capacity]")
        if self.premium_mult < 1.0:
            raise ValueError(f"{self.good}: premium multiplier must be >= 1.0")
        if self.decay.min_rate < 0 or self.decay.min_rate > self.decay.max_rate or self.decay.max_rate >= 1.0:
            raise ValueError(f"{self.good}: bad decay range [{self.decay.min_rate}, {self.decay.max_rate}]")

    @property
    def lower_band(self) -> float:
        return self.target * (1.0 - cfg.BAND_WIDTH)

    @property
    def upper_band(self) -> float:
        return self.target * (1.0 + cfg.BAND_WIDTH)


def default_good_configs() -> Dict[GoodID, GoodConfig]:
    """Build the per-good config table from the current cfg constants."""
    hysteresis = HysteresisConfig(enabled=cfg.HYSTERESIS_ENABLED)
    return {
        'wheat': GoodConfig(
            good='wheat',
            initial_price=cfg.WHEAT_PRICE,
            floor=cfg.WHEAT_PRICE_FLOOR,
            ceiling=cfg.WHEAT_PRICE_CEILING,
            target=cfg.WHEAT_TARGET,
            capacity=cfg.WHEAT_CAPACITY,
            initial_inventory=cfg.WHEAT_TARGET,
            premium_mult=cfg.WHEAT_PREMIUM_MULT,
            decay=DecayConfig(enabled=cfg.WHEAT_DECAY_ENABLED),
            hysteresis=hysteresis,
        ),
        'bread': GoodConfig(
            good='bread',
            initial_price=cfg.BREAD_PRICE,
            floor=cfg.BREAD_PRICE_FLOOR,
            ceiling=cfg.BREAD_PRICE_CEILING,
            target=cfg.BREAD_TARGET,
            capacity=cfg.BREAD_CAPACITY,
            initial_inventory=cfg.BREAD_TARGET,
            premium_mult=cfg.BREAD_PREMIUM_MULT,
            decay=DecayConfig(
                enabled=cfg.BREAD_DECAY_ENABLED,
                min_rate=cfg.BREAD_DECAY_MIN,
                max_rate=cfg.BREAD_DECAY_MAX,
            ),
            hysteresis=hysteresis,
        ),
        'seeds': GoodConfig(
            good='seeds',
            initial_price=cfg.SEEDS_PRICE,
            floor=cfg.SEEDS_PRICE_FLOOR,
            ceiling=cfg.SEEDS_PRICE_CEILING,
            target=cfg.SEEDS_TARGET,
            capacity=cfg.SEEDS_CAPACITY,
            initial_inventory=cfg.SEEDS_TARGET,
            premium_mult=cfg.SEEDS_PREMIUM_MULT,
            hysteresis=hysteresis,
        ),
    }
