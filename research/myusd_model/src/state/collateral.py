"""Collateral ledger state management"""
from dataclasses import dataclass, field
from typing import Dict

from ..constants import PRECISION
from ..errors import InsufficientCollateral
from ..fixed_point import checked_add, checked_sub, mul_div


@dataclass
class CollateralLedger:
    """Per-account collateral balances in base asset units"""
    balances: Dict[str, int] = field(default_factory=dict)
    total_deposited: int = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def deposit(self, account: str, amount: int) -> None:
        """Deposit collateral"""
        self.balances[account] = checked_add(self.balance_of(account), amount)
        self.total_deposited = checked_add(self.total_deposited, amount)

    def withdraw(self, account: str, amount: int) -> None:
        """Withdraw collateral"""
        balance = self.balance_of(account)
        if amount > balance:
            raise InsufficientCollateral(
                f"Insufficient collateral: {amount} > {balance}"
            )
        self.balances[account] = balance - amount
        self.total_deposited = checked_sub(self.total_deposited, amount)

    def value_of(self, account: str, price: int) -> int:
        """Collateral value in stablecoin units for an 18-decimal price"""
        # value = collateral * price / PRECISION
        return mul_div(self.balance_of(account), price, PRECISION)
