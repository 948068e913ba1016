"""Collateral deposit and withdrawal"""
import logging
from typing import TYPE_CHECKING

from ..errors import InvalidAmount, TransferFailed
from ..events import CollateralAdded, CollateralWithdrawn
from .accrue_interest import accrue
from .position_health import validate_safety

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


def add_collateral(engine: "Engine", caller: str, amount: int) -> None:
    """Credit `amount` of base asset, already received by the engine, to `caller`"""
    if amount <= 0:
        raise InvalidAmount(f"Collateral amount must be positive, got {amount}")

    engine.collateral.deposit(caller, amount)

    price = engine.oracle.get_price()
    logger.info(
        "Collateral added",
        extra={
            "event": "engine.add_collateral",
            "account": caller,
            "amount": amount,
            "price": price,
        }
    )
    engine.emit(CollateralAdded(account=caller, amount=amount, price=price))

def withdraw_collateral(engine: "Engine", caller: str, amount: int) -> None:
    """Release collateral back to `caller` if the position stays safe"""
    if amount <= 0:
        raise InvalidAmount(f"Withdrawal amount must be positive, got {amount}")

    accrue(engine.pool, engine.clock())

    # Tentatively apply, then check; the engine restores the ledger on failure
    engine.collateral.withdraw(caller, amount)
    if engine.pool.shares_of(caller) > 0:
        validate_safety(engine, caller)

    if not engine.vault.transfer(caller, amount):
        logger.warning(
            "Collateral transfer failed",
            extra={
                "event": "engine.withdraw_rejected",
                "reason": "transfer_failed",
                "account": caller,
                "amount": amount,
            }
        )
        raise TransferFailed(f"Transfer of {amount} collateral to {caller} failed")

    price = engine.oracle.get_price()
    logger.info(
        "Collateral withdrawn",
        extra={
            "event": "engine.withdraw_collateral",
            "account": caller,
            "amount": amount,
            "price": price,
        }
    )
    engine.emit(CollateralWithdrawn(account=caller, amount=amount, price=price))
