"""MyUSD minting and repayment against the debt share pool"""
import logging
from typing import TYPE_CHECKING

from ..errors import InsufficientAllowance, InsufficientBalance, InvalidAmount
from ..events import DebtBurned, DebtMinted
from .accrue_interest import accrue, amount_to_shares
from .position_health import debt_value, validate_safety

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


def mint_my_usd(engine: "Engine", caller: str, amount: int) -> int:
    """Borrow `amount` MyUSD against the caller's collateral.

    Returns the number of debt shares issued.
    """
    if amount <= 0:
        raise InvalidAmount(f"Mint amount must be positive, got {amount}")

    now = engine.clock()
    accrue(engine.pool, now)

    shares = amount_to_shares(engine.pool, amount, now)
    engine.pool.issue(caller, shares)

    # Shares are already issued here; an unsafe result unwinds the whole call
    validate_safety(engine, caller)

    engine.stablecoin.mint_to(caller, amount)

    logger.info(
        "MyUSD minted",
        extra={
            "event": "engine.mint",
            "account": caller,
            "amount": amount,
            "shares": shares,
            "exchange_rate": engine.pool.debt_exchange_rate,
        }
    )
    engine.emit(DebtMinted(account=caller, amount=amount, shares=shares))
    return shares

def ensure_can_burn(engine: "Engine", account: str, amount: int) -> None:
    """Pre-check that the token ledger will let the engine burn `amount` from `account`"""
    balance = engine.stablecoin.balance_of(account)
    if balance < amount:
        logger.warning(
            "Burn rejected - insufficient balance",
            extra={
                "event": "engine.burn_rejected",
                "reason": "insufficient_balance",
                "account": account,
                "amount": amount,
                "balance": balance,
            }
        )
        raise InsufficientBalance(
            f"Balance of {account} is {balance}, {amount} required"
        )

    allowed = engine.stablecoin.allowance(account, engine.config.engine_address)
    if allowed < amount:
        logger.warning(
            "Burn rejected - insufficient allowance",
            extra={
                "event": "engine.burn_rejected",
                "reason": "insufficient_allowance",
                "account": account,
                "amount": amount,
                "allowance": allowed,
            }
        )
        raise InsufficientAllowance(
            f"Engine allowance from {account} is {allowed}, {amount} required"
        )

def repay_up_to(engine: "Engine", caller: str, amount: int) -> int:
    """Repay up to `amount` MyUSD of the caller's debt.

    Overpayment is clamped to the caller's full debt. Returns the amount burned.
    """
    if amount <= 0:
        raise InvalidAmount(f"Repay amount must be positive, got {amount}")

    now = engine.clock()
    accrue(engine.pool, now)

    shares = amount_to_shares(engine.pool, amount, now)
    held = engine.pool.shares_of(caller)
    if shares > held:
        shares = held
        amount = debt_value(engine, caller)

    ensure_can_burn(engine, caller, amount)

    engine.pool.redeem(caller, shares)
    engine.stablecoin.burn_from(caller, amount)

    logger.info(
        "MyUSD repaid",
        extra={
            "event": "engine.repay",
            "account": caller,
            "amount": amount,
            "shares": shares,
            "remaining_shares": engine.pool.shares_of(caller),
        }
    )
    engine.emit(DebtBurned(account=caller, amount=amount, shares=shares))
    return amount
