"""Checked unsigned 256-bit arithmetic for 18-decimal fixed point values"""
from .constants import MAX_UINT256, PRECISION
from .errors import ArithmeticError


def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    result = a + b
    if result > MAX_UINT256:
        raise ArithmeticError("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    if b > a:
        raise ArithmeticError(f"Arithmetic underflow in subtraction: {a} - {b}")
    return a - b

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    result = a * b
    if result > MAX_UINT256:
        raise ArithmeticError("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Divide with zero checking, truncating toward zero"""
    if b == 0:
        raise ArithmeticError("Division by zero")
    return a // b

def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator with a checked intermediate product, rounded down"""
    return checked_div(checked_mul(a, b), denominator)

def to_fixed(value: int) -> int:
    """Scale a whole number of units to 18-decimal fixed point"""
    return checked_mul(value, PRECISION)

def from_fixed(value: int) -> float:
    """Lossy conversion for display and plotting"""
    return value / PRECISION
