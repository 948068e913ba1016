"""Borrow rate control"""
import logging
from typing import TYPE_CHECKING

from ..errors import InvalidBorrowRate, NotRateController
from ..events import BorrowRateUpdated
from .accrue_interest import accrue

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


def set_borrow_rate(engine: "Engine", caller: str, new_rate: int) -> None:
    """Change the annual borrow rate (bps). Interest under the old rate is
    checkpointed before the change takes effect."""
    if caller != engine.config.rate_controller:
        logger.warning(
            "Borrow rate change rejected - not rate controller",
            extra={
                "event": "engine.set_borrow_rate_rejected",
                "reason": "not_rate_controller",
                "account": caller,
            }
        )
        raise NotRateController(f"{caller} is not the rate controller")

    accrue(engine.pool, engine.clock())

    floor = engine.savings.savings_rate()
    if new_rate < floor:
        logger.warning(
            "Borrow rate change rejected - below savings rate",
            extra={
                "event": "engine.set_borrow_rate_rejected",
                "reason": "below_savings_rate",
                "account": caller,
                "new_rate": new_rate,
                "savings_rate": floor,
            }
        )
        raise InvalidBorrowRate(
            f"Borrow rate {new_rate} bps is below the savings rate {floor} bps"
        )

    old_rate = engine.pool.borrow_rate
    engine.pool.borrow_rate = new_rate

    logger.info(
        "Borrow rate updated",
        extra={
            "event": "engine.set_borrow_rate",
            "account": caller,
            "old_rate": old_rate,
            "new_rate": new_rate,
        }
    )
    engine.emit(BorrowRateUpdated(account=caller, old_rate=old_rate, new_rate=new_rate))
