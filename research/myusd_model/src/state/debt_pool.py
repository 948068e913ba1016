"""Debt share pool state management"""
from dataclasses import dataclass, field
from typing import Dict

from ..constants import INITIAL_EXCHANGE_RATE
from ..fixed_point import checked_add, checked_sub


@dataclass
class DebtPool:
    """Share-based debt ledger.

    Debt is held as shares of one pool; the stablecoin value of a share is
    `debt_exchange_rate` (18 decimals), which only grows as interest accrues.
    """
    borrow_rate: int  # annual rate in bps
    last_accrual_time: int
    debt_exchange_rate: int = INITIAL_EXCHANGE_RATE
    total_debt_shares: int = 0
    shares: Dict[str, int] = field(default_factory=dict)

    def shares_of(self, account: str) -> int:
        return self.shares.get(account, 0)

    def issue(self, account: str, amount: int) -> None:
        """Credit debt shares to an account"""
        self.shares[account] = checked_add(self.shares_of(account), amount)
        self.total_debt_shares = checked_add(self.total_debt_shares, amount)

    def redeem(self, account: str, amount: int) -> None:
        """Debit debt shares from an account"""
        self.shares[account] = checked_sub(self.shares_of(account), amount)
        self.total_debt_shares = checked_sub(self.total_debt_shares, amount)

    def clear(self, account: str) -> int:
        """Remove every share an account holds, returning how many were removed"""
        cleared = self.shares_of(account)
        self.total_debt_shares = checked_sub(self.total_debt_shares, cleared)
        self.shares[account] = 0
        return cleared
