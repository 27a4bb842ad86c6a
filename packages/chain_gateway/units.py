"""
Address validation and smallest-unit <-> display conversions.

Amounts are carried as Python ints in smallest units end to end; strings
only appear at the display boundary.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from eth_utils import is_hex_address, to_checksum_address

from .errors import InvalidAddressError, InvalidAmountError

MAX_UINT256 = 2 ** 256 - 1
MAX_DECIMALS = 255


def validate_address(address: str) -> str:
    """
    Validate a 0x-prefixed 20-byte hex address.

    Any letter case is accepted; the checksum of mixed-case input is not
    enforced.

    Returns:
        The EIP-55 checksummed address

    Raises:
        InvalidAddressError: If the input is not a well-formed address
    """
    if not isinstance(address, str) or not address.startswith(("0x", "0X")):
        raise InvalidAddressError(address)
    if not is_hex_address(address):
        raise InvalidAddressError(address)
    return to_checksum_address(address)


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmountError(f"decimals must be an integer, got {decimals!r}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidAmountError(f"decimals out of range: {decimals}")


def format_units(raw: int, decimals: int) -> str:
    """
    Render ``raw / 10**decimals`` exactly, without trailing zeros.

    >>> format_units(1500000000000000000, 18)
    '1.5'
    >>> format_units(5, 3)
    '0.005'
    """
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise InvalidAmountError(f"raw balance must be a non-negative integer, got {raw!r}")
    _check_decimals(decimals)

    digits = str(raw)
    if len(digits) <= decimals:
        digits = "0" * (decimals - len(digits) + 1) + digits

    point = len(digits) - decimals
    text = digits[:point] + "." + digits[point:]
    text = text.rstrip("0").rstrip(".")
    return text or "0"


def parse_units(amount: Union[int, str, Decimal], decimals: int) -> int:
    """
    Convert a display amount into smallest units.

    Integers are whole-token amounts and are scaled with integer
    arithmetic. Strings and Decimals are accepted for fractional amounts
    but must not carry more precision than ``decimals`` allows.
    """
    _check_decimals(decimals)

    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmountError(f"unsupported amount type: {type(amount).__name__}")

    if isinstance(amount, int):
        value = amount * 10 ** decimals
    else:
        try:
            with localcontext() as ctx:
                ctx.prec = 160
                scaled = Decimal(amount).scaleb(decimals)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmountError(str(amount)) from None
        if not scaled.is_finite() or scaled != scaled.to_integral_value():
            raise InvalidAmountError(f"{amount} has more than {decimals} decimals")
        value = int(scaled)

    if value < 0:
        raise InvalidAmountError(f"{amount} is negative")
    if value > MAX_UINT256:
        raise InvalidAmountError(f"{amount} overflows uint256")
    return value
