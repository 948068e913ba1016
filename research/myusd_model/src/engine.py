"""MyUSD collateralized debt engine.

Single-collateral CDP engine:
- Collateral ledger in the base asset
- Share-based debt pool with simple interest between checkpoints
- 150% minimum collateralization, checked after every mint and withdrawal
- Full liquidation with a 10% liquidator reward, capped at the position's collateral

Every public method runs under one lock, so operations never interleave.
Mutating methods are all-or-nothing: the ledger is snapshotted on entry and
restored if anything raises, and events are only published on success.
The snapshot is a deepcopy of the whole ledger, so each call costs time
proportional to the number of accounts.
"""
import copy
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from .events import Event, Liquidated, event_record
from .interfaces import BaseAssetVault, Oracle, SavingsModule, StablecoinLedger
from .instructions import accrue_interest, liquidate, manage_collateral, mint_repay, update_borrow_rate
from .instructions import position_health
from .state.collateral import CollateralLedger
from .state.debt_pool import DebtPool
from .state.position import Position
from .state.protocol_config import ProtocolConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock() -> int:
    return int(time.time())


class Engine:
    def __init__(
        self,
        config: ProtocolConfig,
        oracle: Oracle,
        stablecoin: StablecoinLedger,
        savings: SavingsModule,
        vault: BaseAssetVault,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.oracle = oracle
        self.stablecoin = stablecoin
        self.savings = savings
        self.vault = vault
        self.clock = clock or wall_clock

        self.collateral = CollateralLedger()
        self.pool = DebtPool(
            borrow_rate=config.borrow_rate,
            last_accrual_time=self.clock(),
        )

        self.events: List[Event] = []
        self._pending: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []
        self._lock = threading.RLock()

    # ==================== Plumbing ====================

    def emit(self, event: Event) -> None:
        """Queue an event; it is published when the current operation commits"""
        self._pending.append(event)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        with self._lock:
            snapshot = copy.deepcopy((self.collateral, self.pool))
            self._pending = []
            try:
                yield
            except Exception as exc:
                self.collateral, self.pool = snapshot
                self._pending = []
                logger.debug(
                    "Operation rolled back",
                    extra={
                        "event": "engine.rollback",
                        "operation": operation,
                        "error": type(exc).__name__,
                    }
                )
                raise
            committed, self._pending = self._pending, []
            for event in committed:
                self.events.append(event)
                logger.debug("Event published", extra=event_record(event))
                for callback in self._subscribers:
                    # Already committed: subscriber failures are logged, never raised
                    try:
                        callback(event)
                    except Exception:
                        logger.exception(
                            "Event subscriber failed",
                            extra={"event": "engine.subscriber_failed", "operation": operation}
                        )

    # ==================== Collateral ====================

    def add_collateral(self, caller: str, amount: int) -> None:
        with self._atomic("add_collateral"):
            manage_collateral.add_collateral(self, caller, amount)

    def withdraw_collateral(self, caller: str, amount: int) -> None:
        with self._atomic("withdraw_collateral"):
            manage_collateral.withdraw_collateral(self, caller, amount)

    # ==================== Debt ====================

    def mint_my_usd(self, caller: str, amount: int) -> int:
        with self._atomic("mint_my_usd"):
            return mint_repay.mint_my_usd(self, caller, amount)

    def repay_up_to(self, caller: str, amount: int) -> int:
        with self._atomic("repay_up_to"):
            return mint_repay.repay_up_to(self, caller, amount)

    def accrue(self) -> int:
        """Checkpoint interest; returns the stored exchange rate"""
        with self._atomic("accrue"):
            return accrue_interest.accrue(self.pool, self.clock())

    # ==================== Admin ====================

    def set_borrow_rate(self, caller: str, new_rate: int) -> None:
        with self._atomic("set_borrow_rate"):
            update_borrow_rate.set_borrow_rate(self, caller, new_rate)

    @property
    def borrow_rate(self) -> int:
        return self.pool.borrow_rate

    # ==================== Liquidation ====================

    def liquidate(self, liquidator: str, target: str) -> Liquidated:
        with self._atomic("liquidate"):
            return liquidate.liquidate(self, liquidator, target)

    # ==================== Views ====================

    def collateral_of(self, account: str) -> int:
        with self._lock:
            return self.collateral.balance_of(account)

    def debt_shares_of(self, account: str) -> int:
        with self._lock:
            return self.pool.shares_of(account)

    def current_exchange_rate(self) -> int:
        with self._lock:
            return accrue_interest.current_exchange_rate(self.pool, self.clock())

    def amount_to_shares(self, amount: int) -> int:
        with self._lock:
            return accrue_interest.amount_to_shares(self.pool, amount, self.clock())

    def shares_to_amount(self, shares: int) -> int:
        with self._lock:
            return accrue_interest.shares_to_amount(self.pool, shares, self.clock())

    def total_debt_value(self) -> int:
        with self._lock:
            return self.shares_to_amount(self.pool.total_debt_shares)

    def calculate_collateral_value(self, account: str) -> int:
        with self._lock:
            return position_health.collateral_value(self, account)

    def get_current_debt_value(self, account: str) -> int:
        with self._lock:
            return position_health.debt_value(self, account)

    def calculate_position_ratio(self, account: str) -> int:
        with self._lock:
            return position_health.position_ratio(self, account)

    def is_liquidatable(self, account: str) -> bool:
        with self._lock:
            return position_health.is_liquidatable(self, account)

    def get_position(self, account: str) -> Position:
        with self._lock:
            return position_health.position_snapshot(self, account)
