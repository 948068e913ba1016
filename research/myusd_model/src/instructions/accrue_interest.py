"""Interest accrual on the debt share pool"""
from ..state.debt_pool import DebtPool
from ..constants import (
    PRECISION,
    BPS_SCALE,
    SECONDS_PER_YEAR
)
from ..fixed_point import checked_add, checked_div, checked_mul, mul_div

def current_exchange_rate(pool: DebtPool, now: int) -> int:
    """Exchange rate the pool would have if checkpointed at `now`.

    Interest is simple between checkpoints:
        interest = total_debt * rate_bps * elapsed / (year * 10000)
    so frequent checkpoints compound and sparse ones under-accrue. Reads only.
    """
    if pool.total_debt_shares == 0:
        return pool.debt_exchange_rate

    time_elapsed = now - pool.last_accrual_time
    if time_elapsed <= 0 or pool.borrow_rate == 0:
        return pool.debt_exchange_rate

    total_debt_value = mul_div(pool.total_debt_shares, pool.debt_exchange_rate, PRECISION)

    interest = checked_div(
        checked_mul(checked_mul(total_debt_value, pool.borrow_rate), time_elapsed),
        SECONDS_PER_YEAR * BPS_SCALE
    )

    # Spread the interest across all outstanding shares
    interest_per_share = mul_div(interest, PRECISION, pool.total_debt_shares)

    return checked_add(pool.debt_exchange_rate, interest_per_share)

def accrue(pool: DebtPool, now: int) -> int:
    """Checkpoint: fold elapsed interest into the stored exchange rate.

    An empty pool only moves its clock; its rate stays frozen.
    Returns the stored exchange rate after the checkpoint.
    """
    if pool.total_debt_shares > 0:
        pool.debt_exchange_rate = current_exchange_rate(pool, now)
    pool.last_accrual_time = max(pool.last_accrual_time, now)
    return pool.debt_exchange_rate

def amount_to_shares(pool: DebtPool, amount: int, now: int) -> int:
    """Shares worth `amount` stablecoin, rounded down in favour of the pool.

    Once the rate is above 1.0 a dust amount (e.g. 1 unit) floors to 0 shares:
    the mint goes through and leaves no debt behind.
    """
    return mul_div(amount, PRECISION, current_exchange_rate(pool, now))

def shares_to_amount(pool: DebtPool, shares: int, now: int) -> int:
    """Stablecoin value of `shares`, rounded down"""
    if shares == 0:
        return 0
    return mul_div(shares, current_exchange_rate(pool, now), PRECISION)
