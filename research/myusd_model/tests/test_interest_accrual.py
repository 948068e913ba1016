"""Interest accrual on the debt share pool"""
from dataclasses import dataclass

from myusd_model.src.constants import (
    BPS_SCALE,
    INITIAL_EXCHANGE_RATE,
    PRECISION,
    SECONDS_PER_YEAR
)
from myusd_model.src.fixed_point import to_fixed
from myusd_model.src.instructions.accrue_interest import (
    accrue,
    amount_to_shares,
    current_exchange_rate
)
from myusd_model.src.state.debt_pool import DebtPool

DAY = 24 * 60 * 60


@dataclass
class AccrualCase:
    """Single checkpoint over `time_elapsed` seconds"""
    description: str
    debt: int           # stablecoin units, 18 decimals
    borrow_rate: int    # bps
    time_elapsed: int   # seconds

    def expected_rate(self) -> int:
        interest = self.debt * self.borrow_rate * self.time_elapsed // (SECONDS_PER_YEAR * BPS_SCALE)
        return PRECISION + interest * PRECISION // self.debt


ACCRUAL_CASES = [
    AccrualCase("1 second at 5%", to_fixed(10_000), 500, 1),
    AccrualCase("1 day at 5%", to_fixed(10_000), 500, DAY),
    AccrualCase("30 days at 12%", to_fixed(250_000), 1200, 30 * DAY),
    AccrualCase("1 year at 5%", to_fixed(10_000), 500, SECONDS_PER_YEAR),
    AccrualCase("1 year at 100%", to_fixed(1), 10_000, SECONDS_PER_YEAR),
    AccrualCase("dust debt", 7, 500, DAY),
]


def pool_with_debt(debt: int, borrow_rate: int) -> DebtPool:
    pool = DebtPool(borrow_rate=borrow_rate, last_accrual_time=0)
    pool.issue("alice", debt)  # at rate 1.0 shares == stablecoin units
    return pool


def test_exchange_rate_table():
    for case in ACCRUAL_CASES:
        pool = pool_with_debt(case.debt, case.borrow_rate)
        rate = current_exchange_rate(pool, case.time_elapsed)
        print(f"{case.description}: {rate / PRECISION:.18f}")
        assert rate == case.expected_rate(), case.description


def test_one_year_at_five_percent_accrues_five_hundred(engine, open_position, rate_controller, clock):
    open_position("alice", collateral=10, debt=10_000)
    engine.set_borrow_rate(rate_controller, 500)

    clock.advance(SECONDS_PER_YEAR)

    assert engine.current_exchange_rate() == PRECISION * 105 // 100
    assert engine.get_current_debt_value("alice") == to_fixed(10_500)
    assert engine.total_debt_value() == to_fixed(10_500)


def test_interest_is_shared_proportionally(engine, open_position, rate_controller, clock):
    open_position("alice", collateral=10, debt=3_000)
    open_position("bob", collateral=10, debt=7_000)
    engine.set_borrow_rate(rate_controller, 500)

    clock.advance(SECONDS_PER_YEAR)

    assert engine.get_current_debt_value("alice") == to_fixed(3_150)
    assert engine.get_current_debt_value("bob") == to_fixed(7_350)


def test_projection_does_not_checkpoint(engine, open_position, rate_controller, clock):
    open_position("alice", collateral=10, debt=10_000)
    engine.set_borrow_rate(rate_controller, 500)
    clock.advance(DAY)
    checkpoint = engine.pool.last_accrual_time

    first = engine.current_exchange_rate()
    second = engine.current_exchange_rate()

    assert first == second > INITIAL_EXCHANGE_RATE
    assert engine.pool.debt_exchange_rate == INITIAL_EXCHANGE_RATE
    assert engine.pool.last_accrual_time == checkpoint


def test_empty_pool_only_moves_clock():
    pool = DebtPool(borrow_rate=500, last_accrual_time=0)

    assert accrue(pool, SECONDS_PER_YEAR) == INITIAL_EXCHANGE_RATE
    assert pool.last_accrual_time == SECONDS_PER_YEAR
    assert pool.debt_exchange_rate == INITIAL_EXCHANGE_RATE


def test_zero_rate_or_zero_elapsed_keeps_rate():
    pool = pool_with_debt(to_fixed(10_000), 0)
    assert current_exchange_rate(pool, SECONDS_PER_YEAR) == INITIAL_EXCHANGE_RATE

    pool = pool_with_debt(to_fixed(10_000), 500)
    assert current_exchange_rate(pool, 0) == INITIAL_EXCHANGE_RATE


def test_checkpoints_compound_between_each_other():
    """Simple interest per checkpoint: two half-year checkpoints beat one yearly one"""
    yearly = pool_with_debt(to_fixed(10_000), 500)
    accrue(yearly, SECONDS_PER_YEAR)

    half_yearly = pool_with_debt(to_fixed(10_000), 500)
    accrue(half_yearly, SECONDS_PER_YEAR // 2)
    assert half_yearly.debt_exchange_rate == PRECISION * 1025 // 1000
    accrue(half_yearly, SECONDS_PER_YEAR)

    assert yearly.debt_exchange_rate == PRECISION * 105 // 100
    assert half_yearly.debt_exchange_rate == PRECISION * 1_050_625 // 1_000_000
    assert half_yearly.debt_exchange_rate > yearly.debt_exchange_rate


def test_rate_never_decreases_across_checkpoints():
    pool = pool_with_debt(to_fixed(1_234), 750)
    previous = pool.debt_exchange_rate
    for now in [0, 1, 60, 3600, DAY, 7 * DAY, SECONDS_PER_YEAR, SECONDS_PER_YEAR]:
        rate = accrue(pool, now)
        assert rate >= previous
        previous = rate


def test_amount_to_shares_rounds_down():
    pool = pool_with_debt(to_fixed(10_000), 500)
    accrue(pool, SECONDS_PER_YEAR)  # rate 1.05

    assert amount_to_shares(pool, 1, SECONDS_PER_YEAR) == 0
    assert amount_to_shares(pool, 21, SECONDS_PER_YEAR) == 20
    assert amount_to_shares(pool, to_fixed(105), SECONDS_PER_YEAR) == to_fixed(100)


def test_small_mints_never_beat_one_large_mint(engine, open_position, rate_controller, clock):
    open_position("alice", collateral=10, debt=1_000)
    engine.set_borrow_rate(rate_controller, 500)
    clock.advance(SECONDS_PER_YEAR // 3)
    engine.accrue()
    rate = engine.pool.debt_exchange_rate
    before = engine.debt_shares_of("alice")

    small, count = 333, 50
    for _ in range(count):
        engine.mint_my_usd("alice", small)

    minted_shares = engine.debt_shares_of("alice") - before
    assert minted_shares <= small * count * PRECISION // rate
