"""
Ledger invariants under random operation sequences

INVARIANTS:
    total_debt_shares == sum(debt_shares_of[a])
    debt_exchange_rate never decreases
    a rejected operation leaves the engine ledger and token balances untouched
    a successful liquidation leaves the target without debt
"""
import copy

from hypothesis import given, settings
from hypothesis import strategies as st

from myusd_model.src.collaborators import (
    FixedPriceOracle,
    FixedSavingsModule,
    InMemoryBaseAsset,
    InMemoryStablecoin,
    ManualClock
)
from myusd_model.src.constants import PRECISION
from myusd_model.src.engine import Engine
from myusd_model.src.errors import ProtocolError
from myusd_model.src.fixed_point import to_fixed
from myusd_model.src.state.protocol_config import ProtocolConfig

ACCOUNTS = ["alice", "bob", "carol"]
KEEPER = "keeper"
CONTROLLER = "controller"
UNLIMITED = 2**200

OPERATIONS = ["deposit", "withdraw", "mint", "repay", "liquidate", "rate", "price", "wait"]

operation = st.tuples(
    st.sampled_from(OPERATIONS),
    st.sampled_from(ACCOUNTS),
    st.integers(min_value=0, max_value=to_fixed(20_000)),
)


def make_engine():
    stablecoin = InMemoryStablecoin(minter="engine")
    engine = Engine(
        ProtocolConfig(engine_address="engine", rate_controller=CONTROLLER, borrow_rate=500),
        oracle=FixedPriceOracle(to_fixed(2000)),
        stablecoin=stablecoin,
        savings=FixedSavingsModule(100),
        vault=InMemoryBaseAsset(),
        clock=ManualClock(start=0),
    )
    for account in ACCOUNTS + [KEEPER]:
        stablecoin.approve(account, "engine", UNLIMITED)
    stablecoin.mint_to(KEEPER, to_fixed(10**9))
    return engine


def apply(engine, name, account, amount):
    if name == "deposit":
        engine.add_collateral(account, amount)
    elif name == "withdraw":
        engine.withdraw_collateral(account, amount)
    elif name == "mint":
        engine.mint_my_usd(account, amount)
    elif name == "repay":
        engine.repay_up_to(account, amount)
    elif name == "liquidate":
        engine.liquidate(KEEPER, account)
        assert engine.debt_shares_of(account) == 0
    elif name == "rate":
        engine.set_borrow_rate(CONTROLLER, amount % 5_000)
    elif name == "price":
        engine.oracle.set_price(to_fixed(500) + amount % to_fixed(3_000))
    elif name == "wait":
        engine.clock.advance(amount % (400 * 24 * 60 * 60))


def observable_state(engine):
    return (
        copy.deepcopy(engine.collateral),
        copy.deepcopy(engine.pool),
        dict(engine.stablecoin.balances),
        dict(engine.vault.paid_out),
        len(engine.events),
    )


@given(st.lists(operation, max_size=40))
@settings(max_examples=100, deadline=None)
def test_invariants_hold_for_any_sequence(operations):
    engine = make_engine()
    previous_rate = engine.pool.debt_exchange_rate

    for name, account, amount in operations:
        before = observable_state(engine)
        try:
            apply(engine, name, account, amount)
        except ProtocolError:
            assert observable_state(engine) == before

        pool = engine.pool
        assert pool.total_debt_shares == sum(pool.shares.values())
        assert pool.debt_exchange_rate >= previous_rate
        assert all(balance >= 0 for balance in engine.collateral.balances.values())
        assert all(shares >= 0 for shares in pool.shares.values())
        previous_rate = pool.debt_exchange_rate


@given(
    st.integers(min_value=1, max_value=10**6),
    st.integers(min_value=1, max_value=60),
    st.integers(min_value=1, max_value=10 * 365 * 24 * 60 * 60),
)
@settings(max_examples=50, deadline=None)
def test_split_mints_never_yield_extra_shares(amount, count, elapsed):
    engine = make_engine()
    engine.add_collateral("alice", to_fixed(100))
    engine.mint_my_usd("alice", to_fixed(1_000))
    engine.clock.advance(elapsed)
    engine.accrue()
    rate = engine.pool.debt_exchange_rate
    before = engine.debt_shares_of("alice")

    for _ in range(count):
        engine.mint_my_usd("alice", amount)

    assert engine.debt_shares_of("alice") - before <= amount * count * PRECISION // rate
