from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional

import granary.goods as gds


@dataclass
class Wallet:
    balance: float = 0.0

    def __post_init__(self):
        if not self.balance >= 0:
            raise ValueError(f"wallet balance must be >= 0, got {self.balance}")
        self.balance = float(self.balance)

    def credit(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"cannot credit a negative amount ({amount})")
        self.balance += float(amount)

    def debit(self, amount: float) -> bool:
        """Take `amount` out if it is covered; report whether it was."""
        if amount < 0 or amount > self.balance:
            return False
        self.balance -= float(amount)
        return True


@dataclass
class Trader:
    """
    Anything that trades with the market: holdings per good plus a wallet.

    `produces`, `profit_paused` and `food_reserve` feed the bread guards;
    plain consumers leave them at their defaults.
    """
    name: str
    wallet: Wallet = field(default_factory=Wallet)
    holdings: Dict[gds.GoodID, int] = field(default_factory=lambda: {g: 0 for g in gds.GOODS})
    produces: Optional[gds.GoodID] = None
    profit_paused: bool = False
    food_reserve: int = 0

    @property
    def balance(self) -> float:
        return self.wallet.balance
