"""Custom errors for the MyUSD engine"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class ArithmeticError(ProtocolError):
    """Error for arithmetic overflow/underflow"""
    pass

class InvalidAmount(ProtocolError):
    """Zero or otherwise nonsensical quantity"""
    pass

class UnsafePositionRatio(ProtocolError):
    """Position would be left (or is) below the collateral ratio threshold"""
    pass

class NotLiquidatable(ProtocolError):
    """Liquidation attempted on a safe position"""
    pass

class InvalidBorrowRate(ProtocolError):
    """Borrow rate below the savings rate floor"""
    pass

class NotRateController(ProtocolError):
    """Caller is not allowed to change the borrow rate"""
    pass

class InsufficientCollateral(ProtocolError):
    """Withdrawal exceeds the deposited collateral"""
    pass

class InsufficientBalance(ProtocolError):
    """Stablecoin balance too low to cover a burn"""
    pass

class InsufficientAllowance(ProtocolError):
    """Engine is not authorized to burn the requested stablecoin amount"""
    pass

class TransferFailed(ProtocolError):
    """Base asset transfer did not complete"""
    pass
