"""
conftest.py - Shared pytest fixtures for engine tests

Every engine starts with:
- a manual clock (time only moves when a test advances it)
- collateral priced at 2000 MyUSD per unit
- a 2% savings rate floor and a 0% borrow rate
- in-memory MyUSD ledger and base asset vault
"""

import pytest

from myusd_model.src.collaborators import (
    FixedPriceOracle,
    FixedSavingsModule,
    InMemoryBaseAsset,
    InMemoryStablecoin,
    ManualClock,
)
from myusd_model.src.engine import Engine
from myusd_model.src.fixed_point import to_fixed
from myusd_model.src.state.protocol_config import ProtocolConfig

ENGINE = "engine"
RATE_CONTROLLER = "rate_controller"
START_TIME = 1_700_000_000


@pytest.fixture
def clock():
    return ManualClock(start=START_TIME)


@pytest.fixture
def oracle():
    return FixedPriceOracle(to_fixed(2000))


@pytest.fixture
def stablecoin():
    return InMemoryStablecoin(minter=ENGINE)


@pytest.fixture
def savings():
    return FixedSavingsModule(rate=200)


@pytest.fixture
def vault():
    return InMemoryBaseAsset()


@pytest.fixture
def engine(clock, oracle, stablecoin, savings, vault):
    config = ProtocolConfig(engine_address=ENGINE, rate_controller=RATE_CONTROLLER)
    return Engine(config, oracle, stablecoin, savings, vault, clock=clock)


@pytest.fixture
def open_position(engine):
    """Deposit `collateral` units and mint `debt` MyUSD (whole units) for `account`."""
    def _open(account, collateral, debt):
        engine.add_collateral(account, to_fixed(collateral))
        if debt:
            engine.mint_my_usd(account, to_fixed(debt))
    return _open


@pytest.fixture
def fund(stablecoin):
    """Give `account` MyUSD bought on the market and let the engine burn it."""
    def _fund(account, amount, allowance=None):
        stablecoin.mint_to(account, amount)
        stablecoin.approve(account, ENGINE, amount if allowance is None else allowance)
    return _fund


@pytest.fixture
def rate_controller():
    return RATE_CONTROLLER
