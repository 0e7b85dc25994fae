from __future__ import annotations
from dataclasses import dataclass
from typing import Dict
import math

import granary.config as cfg
import granary.goods as gds


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass
class PricingEngine:
    """
    Stateless willingness-to-trade curves for the market.

    Every method takes the live inventory (and reference price where needed)
    as arguments, so the same engine can price hypothetical positions, e.g.
    the next unit inside a micro-fill.
    """
    configs: Dict[gds.GoodID, gds.GoodConfig]

    def bid_multiplier(self, good: gds.GoodID, inventory: int) -> float:
        """
        Multiplier on the reference price given the inventory position.

        - below the lower band: premium, x1.0 at the band edge up to the
          configured max premium, saturating 50% below the band
        - inside the band: x1.0 at the lower edge down to a mild discount
        - above the upper band: mild, steep and far zones of discount
        """
        c = self.configs[good]
        lb, ub = c.lower_band, c.upper_band
        inv = max(0, inventory)

        if inv < lb:
            shortage = (lb - inv) / lb
            depth = min(shortage / cfg.PREMIUM_DEPTH_CAP, 1.0)
            return 1.0 + (c.premium_mult - 1.0) * depth

        band_top = 1.0 - cfg.IN_BAND_DISCOUNT
        if inv <= ub:
            return _lerp(1.0, band_top, (inv - lb) / (ub - lb))

        excess = (inv - ub) / ub
        if excess < cfg.MILD_ZONE_END:
            return _lerp(band_top, cfg.MILD_ZONE_MULT, excess / cfg.MILD_ZONE_END)
        if excess < cfg.STEEP_ZONE_END:
            t = (excess - cfg.MILD_ZONE_END) / (cfg.STEEP_ZONE_END - cfg.MILD_ZONE_END)
            return _lerp(cfg.MILD_ZONE_MULT, cfg.STEEP_ZONE_MULT, t)
        far = cfg.STEEP_ZONE_MULT - cfg.FAR_ZONE_SLOPE * (excess - cfg.STEEP_ZONE_END)
        return max(cfg.FAR_ZONE_MIN_MULT, far)

    def bid_price(self, good: gds.GoodID, inventory: int, reference_price: float) -> float:
        c = self.configs[good]
        bid = reference_price * self.bid_multiplier(good, inventory)
        return float(min(c.ceiling, max(c.floor, bid)))

    def max_buy_qty(self, good: gds.GoodID, inventory: int) -> int:
        """
        Units the market is willing to take right now.

        Full remaining capacity up to the upper band; above it the offer
        tapers toward a small fraction of remaining capacity rather than
        closing outright.
        """
        c = self.configs[good]
        remaining = max(0, c.capacity - int(inventory))
        if remaining == 0:
            return 0
        if inventory <= c.upper_band:
            return remaining

        excess = min((inventory - c.upper_band) / c.upper_band, cfg.TAPER_EXCESS_CAP)
        fraction = cfg.TAPER_MIN_FRACTION + (1.0 - cfg.TAPER_MIN_FRACTION) * (1.0 - excess / cfg.TAPER_EXCESS_CAP)
        return max(1, int(remaining * fraction))

    def distress_multiplier(self, good: gds.GoodID, inventory: int, target: int | None = None) -> float:
        """Extra discount for units that overflow storage capacity."""
        if target is None:
            target = self.configs[good].target
        ratio = max(1.0, inventory / max(1, target))
        mult = cfg.DISTRESS_BASE * math.exp(-cfg.DISTRESS_STEEPNESS * (ratio - 1.0))
        return max(cfg.DISTRESS_MIN_MULT, mult)
