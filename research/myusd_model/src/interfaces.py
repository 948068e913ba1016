"""Collaborator contracts consumed by the engine"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class Oracle(Protocol):
    def get_price(self) -> int:
        """Price of one collateral unit in stablecoin units, 18 decimals"""
        ...


@runtime_checkable
class StablecoinLedger(Protocol):
    def mint_to(self, account: str, amount: int) -> None:
        ...

    def burn_from(self, account: str, amount: int) -> None:
        """Burn using the engine's allowance; raises InsufficientBalance or InsufficientAllowance.

        The engine checks balance_of and allowance first and relies on the burn
        then succeeding: the engine only rolls back its own ledger, so a burn
        that fails after a vault payout does not reclaim the paid collateral.
        """
        ...

    def balance_of(self, account: str) -> int:
        ...

    def allowance(self, owner: str, spender: str) -> int:
        ...


@runtime_checkable
class SavingsModule(Protocol):
    def savings_rate(self) -> int:
        """Annual savings rate in bps"""
        ...


@runtime_checkable
class BaseAssetVault(Protocol):
    def transfer(self, to: str, amount: int) -> bool:
        """Pay base asset out of the engine; False if the transfer did not go through"""
        ...
