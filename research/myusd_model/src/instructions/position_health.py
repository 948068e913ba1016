"""Position health evaluation"""
import logging
from typing import TYPE_CHECKING

from ..constants import (
    COLLATERAL_RATIO_THRESHOLD,
    MAX_POSITION_RATIO,
    PERCENT_SCALE,
    PRECISION
)
from ..errors import UnsafePositionRatio
from ..fixed_point import mul_div
from ..state.position import Position
from .accrue_interest import shares_to_amount

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


def collateral_value(engine: "Engine", account: str) -> int:
    return engine.collateral.value_of(account, engine.oracle.get_price())

def debt_value(engine: "Engine", account: str) -> int:
    return shares_to_amount(engine.pool, engine.pool.shares_of(account), engine.clock())

def position_ratio(engine: "Engine", account: str) -> int:
    """collateral_value / debt_value at 18 decimals; max ratio without debt"""
    debt = debt_value(engine, account)
    if debt == 0:
        return MAX_POSITION_RATIO
    return mul_div(collateral_value(engine, account), PRECISION, debt)

def _below_threshold(ratio: int) -> bool:
    # ratio * 100 < 150 * 1e18 on unbounded ints, so the max ratio never overflows
    return ratio * PERCENT_SCALE < COLLATERAL_RATIO_THRESHOLD * PRECISION

def is_liquidatable(engine: "Engine", account: str) -> bool:
    return _below_threshold(position_ratio(engine, account))

def validate_safety(engine: "Engine", account: str) -> None:
    """Reject a tentatively applied change that leaves `account` under 150%.

    The caller owns the rollback.
    """
    ratio = position_ratio(engine, account)
    if _below_threshold(ratio):
        logger.warning(
            "Position below collateral ratio threshold",
            extra={
                "event": "engine.unsafe_position",
                "account": account,
                "ratio": ratio,
                "threshold": COLLATERAL_RATIO_THRESHOLD,
            }
        )
        raise UnsafePositionRatio(
            f"Position ratio {ratio * PERCENT_SCALE / PRECISION:.2f}% is below "
            f"the {COLLATERAL_RATIO_THRESHOLD}% threshold"
        )

def position_snapshot(engine: "Engine", account: str) -> Position:
    ratio = position_ratio(engine, account)
    return Position(
        account=account,
        collateral=engine.collateral.balance_of(account),
        debt_shares=engine.pool.shares_of(account),
        debt_value=debt_value(engine, account),
        collateral_value=collateral_value(engine, account),
        ratio=ratio,
        liquidatable=_below_threshold(ratio),
    )
