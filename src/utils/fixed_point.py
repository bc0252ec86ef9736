import enum

from core.constants import UINT256_MAX
from core.exceptions import ArithmeticImpossible, InvalidAmount


class Rounding(str, enum.Enum):
    down = "down"
    up = "up"


def check_uint256(value, name: str = "amount") -> int:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise InvalidAmount(f"{name} {value} is outside the uint256 range")
    return value


def mul_div(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """Compute x * y / denominator at full precision, rounded as requested.

    Python integers do not overflow, so the product is exact; only the final
    quotient has to fit in uint256.
    """
    if denominator == 0:
        raise ArithmeticImpossible(f"mul_div({x}, {y}, 0): division by zero")

    quotient, remainder = divmod(x * y, denominator)
    if rounding == Rounding.up and remainder > 0:
        quotient += 1

    if quotient > UINT256_MAX:
        raise ArithmeticImpossible(
            f"mul_div({x}, {y}, {denominator}) does not fit in uint256"
        )
    return quotient
