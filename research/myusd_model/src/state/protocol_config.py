"""Engine configuration"""
from dataclasses import dataclass


@dataclass
class ProtocolConfig:
    """Identities and initial parameters the engine is constructed with"""
    engine_address: str   # spender identity the stablecoin ledger authorizes burns for
    rate_controller: str  # only identity allowed to call set_borrow_rate
    borrow_rate: int = 0  # initial annual borrow rate in bps
