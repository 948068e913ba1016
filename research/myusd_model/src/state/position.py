"""Position snapshot"""
from dataclasses import dataclass

from ..constants import MAX_POSITION_RATIO, PRECISION


@dataclass(frozen=True)
class Position:
    """Point-in-time view of one account's CDP"""
    account: str
    collateral: int        # base asset units
    debt_shares: int
    debt_value: int        # stablecoin units at the projected exchange rate
    collateral_value: int  # stablecoin units at the oracle price
    ratio: int             # collateral_value / debt_value, 18 decimals
    liquidatable: bool

    @property
    def has_debt(self) -> bool:
        return self.debt_value > 0

    @property
    def ratio_percent(self) -> float:
        """Collateralization in percent, inf for debt-free positions"""
        if self.ratio == MAX_POSITION_RATIO:
            return float("inf")
        return self.ratio * 100 / PRECISION
