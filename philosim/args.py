"""Command-line argument parsing and validation for the simulation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

INT_MAX = 2**31 - 1
INT_MIN = -(2**31)

DIGITS = "1234567890"
_WHITESPACE = "\t\n\v\f\r "

USAGE = (
    "philosim <philos> <time to die> <time to eat> <time to sleep> "
    "(optional) <number of cycles>\n*Allowed values 1 - INT_MAX"
)


class ArgumentError(ValueError):
    """Raised when the command-line arguments are not acceptable."""


@dataclass(frozen=True)
class Settings:
    """Parameters of one simulation run; times are in milliseconds."""

    philos: int
    time_to_die: int
    time_to_eat: int
    time_to_sleep: int
    max_cycles: int = 0


def _wrap32(value: int) -> int:
    """Reduce an integer to the range of a signed 32-bit int."""
    value &= 0xFFFFFFFF
    return value - 2**32 if value > INT_MAX else value


def _split_sign(text: str) -> tuple[int, str]:
    """Strip leading whitespace and an optional sign; return (sign, rest)."""
    rest = text.lstrip(_WHITESPACE)
    sign = 1
    if rest[:1] in ("-", "+"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    return sign, rest


def _leading_digits(text: str) -> str:
    end = 0
    for ch in text:
        if ch not in DIGITS:
            break
        end += 1
    return text[:end]


def parse_int(text: str) -> int:
    """Lenient integer parse of the leading number in ``text``.

    Whitespace and a sign may precede the digits; parsing stops at the first
    non-digit. Twenty or more significant digits give -1 for positive input
    and 0 for negative input. Other results wrap to a 32-bit int.
    """
    sign, rest = _split_sign(text)
    digits = _leading_digits(rest.lstrip("0"))
    if len(digits) >= 20:
        return -1 if sign == 1 else 0
    value = int(digits) if digits else 0
    return _wrap32(sign * value)


def parse_strict(text: str) -> int:
    """Parse the leading number in ``text``, rejecting zero and overflow.

    A leading zero digit, a missing number, or a value outside the 32-bit
    signed range raises :class:`ArgumentError`.
    """
    sign, rest = _split_sign(text)
    digits = _leading_digits(rest)
    if not digits:
        raise ArgumentError(f"not a number: {text!r}")
    value = 0
    for ch in digits:
        value = value * 10 + int(ch)
        if value == 0 or (sign == 1 and value > INT_MAX) or (
            sign == -1 and -value < INT_MIN
        ):
            raise ArgumentError(f"value out of range: {text!r}")
    return value * sign


def validate_args(args: Sequence[str]) -> list[int]:
    """Check that every argument is a plain positive 32-bit number.

    Returns the arguments converted with :func:`parse_int`. Once one argument
    has failed the strict parse, every later character counts as invalid.
    """
    failed = False
    for arg in args:
        if not failed:
            try:
                parse_strict(arg)
            except ArgumentError:
                failed = True
        for ch in arg:
            if ch not in DIGITS or failed:
                raise ArgumentError(USAGE)
    return [parse_int(arg) for arg in args]


def parse_args(argv: Sequence[str]) -> Settings:
    """Build :class:`Settings` from the arguments that follow the program name."""
    if len(argv) not in (4, 5):
        raise ArgumentError(USAGE)
    values = validate_args(argv)
    philos, time_to_die, time_to_eat, time_to_sleep = values[:4]
    max_cycles = values[4] if len(values) == 5 else 0
    return Settings(
        philos=philos,
        time_to_die=time_to_die,
        time_to_eat=time_to_eat,
        time_to_sleep=time_to_sleep,
        max_cycles=max_cycles,
    )