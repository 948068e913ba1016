"""In-memory collaborators for tests and simulations"""
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Tuple

from .constants import PRECISION
from .errors import InsufficientAllowance, InsufficientBalance, InvalidAmount


@dataclass
class FixedPriceOracle:
    """Oracle returning whatever price was last set"""
    price: int = PRECISION

    def get_price(self) -> int:
        return self.price

    def set_price(self, price: int) -> None:
        if price < 0:
            raise InvalidAmount(f"Price cannot be negative, got {price}")
        self.price = price


@dataclass
class FixedSavingsModule:
    rate: int = 0  # bps

    def savings_rate(self) -> int:
        return self.rate


@dataclass
class InMemoryStablecoin:
    """MyUSD balance ledger.

    `minter` is the engine identity: it may mint freely and burns spend the
    holder's allowance granted to it.
    """
    minter: str
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)
    total_supply: int = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self.allowances[(owner, spender)] = amount

    def mint_to(self, account: str, amount: int) -> None:
        self.balances[account] = self.balance_of(account) + amount
        self.total_supply += amount

    def burn_from(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if amount > balance:
            raise InsufficientBalance(f"Balance {balance} below burn amount {amount}")
        allowed = self.allowance(account, self.minter)
        if amount > allowed:
            raise InsufficientAllowance(f"Allowance {allowed} below burn amount {amount}")
        self.allowances[(account, self.minter)] = allowed - amount
        self.balances[account] = balance - amount
        self.total_supply -= amount


@dataclass
class InMemoryBaseAsset:
    """Base asset held by the engine; records payouts.

    Transfers to anyone in `rejecting` fail, as does every transfer while
    `halted` is set.
    """
    paid_out: Dict[str, int] = field(default_factory=dict)
    rejecting: Set[str] = field(default_factory=set)
    halted: bool = False

    def balance_of(self, account: str) -> int:
        return self.paid_out.get(account, 0)

    def transfer(self, to: str, amount: int) -> bool:
        if self.halted or to in self.rejecting:
            return False
        self.paid_out[to] = self.balance_of(to) + amount
        return True


class ManualClock:
    """Integer-second clock that only moves when told to"""

    def __init__(self, start: Optional[int] = None):
        self.now = int(time.time()) if start is None else start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now
