"""Full liquidation of under-collateralized positions"""
import logging
from typing import TYPE_CHECKING

from ..constants import LIQUIDATOR_REWARD_RATE, PERCENT_SCALE
from ..errors import NotLiquidatable, TransferFailed
from ..events import Liquidated
from ..fixed_point import mul_div
from .accrue_interest import accrue
from .mint_repay import ensure_can_burn
from .position_health import collateral_value, debt_value, is_liquidatable, position_ratio

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


def collateral_for_debt(debt: int, collateral: int, value: int) -> int:
    """Base asset handed to the liquidator for clearing `debt`.

    The collateral equivalent of the debt plus the liquidator reward, capped
    at what the position holds. A worthless position gives up everything.
    """
    if value == 0:
        return collateral
    # collateral_to_cover = debt * collateral / collateral_value
    to_cover = mul_div(debt, collateral, value)
    reward = mul_div(to_cover, LIQUIDATOR_REWARD_RATE, PERCENT_SCALE)
    return min(to_cover + reward, collateral)

def liquidate(engine: "Engine", liquidator: str, target: str) -> Liquidated:
    """Repay all of `target`'s debt from `liquidator` and pay them collateral"""
    accrue(engine.pool, engine.clock())

    if not is_liquidatable(engine, target):
        logger.warning(
            "Liquidation rejected - position is safe",
            extra={
                "event": "engine.liquidate_rejected",
                "reason": "not_liquidatable",
                "liquidator": liquidator,
                "account": target,
                "ratio": position_ratio(engine, target),
            }
        )
        raise NotLiquidatable(f"Position of {target} is above the liquidation threshold")

    debt = debt_value(engine, target)
    collateral = engine.collateral.balance_of(target)
    value = collateral_value(engine, target)

    ensure_can_burn(engine, liquidator, debt)

    engine.pool.clear(target)

    seized = collateral_for_debt(debt, collateral, value)
    engine.collateral.withdraw(target, seized)

    # Payout before the burn: the burn was pre-checked, the payout can still fail.
    # A ledger that rejects the burn anyway leaves the payout in place; only the
    # engine ledger is restored (see StablecoinLedger.burn_from).
    if not engine.vault.transfer(liquidator, seized):
        logger.warning(
            "Liquidation collateral transfer failed",
            extra={
                "event": "engine.liquidate_rejected",
                "reason": "transfer_failed",
                "liquidator": liquidator,
                "account": target,
                "amount": seized,
            }
        )
        raise TransferFailed(f"Transfer of {seized} collateral to {liquidator} failed")

    engine.stablecoin.burn_from(liquidator, debt)

    price = engine.oracle.get_price()
    logger.info(
        "Position liquidated",
        extra={
            "event": "engine.liquidate",
            "liquidator": liquidator,
            "account": target,
            "debt_cleared": debt,
            "collateral_received": seized,
            "collateral_left": engine.collateral.balance_of(target),
            "price": price,
        }
    )
    event = Liquidated(
        liquidator=liquidator,
        account=target,
        collateral_received=seized,
        debt_cleared=debt,
        price=price,
    )
    engine.emit(event)
    return event
