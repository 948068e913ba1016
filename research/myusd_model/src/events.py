"""Notifications emitted by the engine after an operation commits"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Union


@dataclass(frozen=True)
class CollateralAdded:
    account: str
    amount: int
    price: int

@dataclass(frozen=True)
class CollateralWithdrawn:
    account: str
    amount: int
    price: int

@dataclass(frozen=True)
class DebtMinted:
    account: str
    amount: int
    shares: int

@dataclass(frozen=True)
class DebtBurned:
    account: str
    amount: int
    shares: int

@dataclass(frozen=True)
class BorrowRateUpdated:
    account: str
    old_rate: int
    new_rate: int

@dataclass(frozen=True)
class Liquidated:
    liquidator: str
    account: str
    collateral_received: int
    debt_cleared: int
    price: int


Event = Union[
    CollateralAdded,
    CollateralWithdrawn,
    DebtMinted,
    DebtBurned,
    BorrowRateUpdated,
    Liquidated,
]


def event_record(event: Event) -> Dict[str, Any]:
    """Flat dict for logging and result frames"""
    record = asdict(event)
    record["event"] = type(event).__name__
    return record
