"""Commission rates, fixed-precision decimals and finality provider descriptions."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal, localcontext
from typing import Union

PRECISION = 18
_SCALE = 10**PRECISION
_MAX_BIT_LEN = 256 + 60
_DIGITS = re.compile(r"[+-]?[0-9]+")

MAX_MONIKER_LENGTH = 70
MAX_IDENTITY_LENGTH = 3000
MAX_WEBSITE_LENGTH = 140
MAX_SECURITY_CONTACT_LENGTH = 140
MAX_DETAILS_LENGTH = 280


class DecimalFormatError(ValueError):
    """Raised when a decimal string or value cannot be represented."""


def _from_scaled(scaled: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 400
        return Decimal(scaled).scaleb(-PRECISION)


def parse_legacy_dec(text: str) -> Decimal:
    """Parse a decimal string with at most 18 fractional digits."""
    if not text:
        raise DecimalFormatError("decimal string cannot be empty")
    negative = text.startswith("-")
    body = text[1:] if negative else text
    if not body:
        raise DecimalFormatError("decimal string cannot be empty")

    parts = body.split(".")
    if len(parts) > 2:
        raise DecimalFormatError(f"invalid decimal string: {text}")
    combined = parts[0]
    decimals = 0
    if len(parts) == 2:
        decimals = len(parts[1])
        combined += parts[1]
        if decimals == 0 or not combined:
            raise DecimalFormatError(f"invalid decimal length: {text}")
    if decimals > PRECISION:
        raise DecimalFormatError(
            f"value '{text}' exceeds max precision by {decimals - PRECISION} decimal places: "
            f"max precision {PRECISION}"
        )
    combined += "0" * (PRECISION - decimals)
    if not _DIGITS.fullmatch(combined):
        raise DecimalFormatError(f"failed to set decimal string with base 10: {combined}")

    scaled = int(combined)
    if scaled.bit_length() > _MAX_BIT_LEN:
        raise DecimalFormatError(
            f"decimal '{text}' out of range; bitLen: got {scaled.bit_length()}, max {_MAX_BIT_LEN}"
        )
    return _from_scaled(-scaled if negative else scaled)


def format_legacy_dec(value: Union[Decimal, int]) -> str:
    """Format ``value`` with exactly 18 fractional digits."""
    number = Decimal(value)
    if not number.is_finite():
        raise DecimalFormatError(f"value {value} is not finite")
    with localcontext() as ctx:
        ctx.prec = 400
        scaled = number.scaleb(PRECISION)
        if scaled != scaled.to_integral_value():
            raise DecimalFormatError(
                f"value {value} exceeds max precision of {PRECISION} decimal places"
            )
        integer = int(scaled)
    sign = "-" if integer < 0 else ""
    whole, fraction = divmod(abs(integer), _SCALE)
    return f"{sign}{whole}.{fraction:0{PRECISION}d}"


@dataclass
class CommissionRates:
    """Commission rates of a finality provider, as decimal strings."""

    rate: str = ""
    max_rate: str = ""
    max_change_rate: str = ""

    def to_decimals(self) -> tuple[Decimal, Decimal, Decimal]:
        """Return the rate, maximum rate and maximum change rate as decimals."""
        try:
            rate = parse_legacy_dec(self.rate)
        except DecimalFormatError as exc:
            raise DecimalFormatError(f"invalid commission rate: {exc}") from exc
        try:
            max_rate = parse_legacy_dec(self.max_rate)
        except DecimalFormatError as exc:
            raise DecimalFormatError(f"invalid commission max rate: {exc}") from exc
        try:
            max_change_rate = parse_legacy_dec(self.max_change_rate)
        except DecimalFormatError as exc:
            raise DecimalFormatError(f"invalid commission max change rate: {exc}") from exc
        return rate, max_rate, max_change_rate


@dataclass
class CommissionInfo:
    """Commission limits of a finality provider and when they were last updated."""

    max_rate: str
    max_change_rate: str
    update_time: datetime


@dataclass
class Description:
    """Human-readable description of a finality provider."""

    moniker: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""

    def ensure_length(self) -> "Description":
        """Return a copy, raising ValueError if any field is too long."""
        limits = (
            ("moniker", self.moniker, MAX_MONIKER_LENGTH),
            ("identity", self.identity, MAX_IDENTITY_LENGTH),
            ("website", self.website, MAX_WEBSITE_LENGTH),
            ("security contact", self.security_contact, MAX_SECURITY_CONTACT_LENGTH),
            ("details", self.details, MAX_DETAILS_LENGTH),
        )
        for name, value, limit in limits:
            length = len(value.encode("utf-8"))
            if length > limit:
                raise ValueError(f"invalid {name} length; got: {length}, max: {limit}")
        return replace(self)


def new_commission_rates(rate: Decimal, max_rate: Decimal, max_change_rate: Decimal) -> CommissionRates:
    """Return commission rates holding the given decimals."""
    return CommissionRates(
        rate=format_legacy_dec(rate),
        max_rate=format_legacy_dec(max_rate),
        max_change_rate=format_legacy_dec(max_change_rate),
    )


def new_commission_info_with_time(
    max_rate: Decimal, max_change_rate: Decimal, updated_at: datetime
) -> CommissionInfo:
    """Return commission limits stamped with ``updated_at``."""
    return CommissionInfo(
        max_rate=format_legacy_dec(max_rate),
        max_change_rate=format_legacy_dec(max_change_rate),
        update_time=updated_at,
    )


def get_commission_rates(rate_str: str, max_rate_str: str, max_change_rate_str: str) -> CommissionRates:
    """Parse the three rate strings into commission rates."""
    try:
        rate = parse_legacy_dec(rate_str)
    except DecimalFormatError as exc:
        raise DecimalFormatError(f"invalid commission rate: {exc}") from exc
    try:
        max_rate = parse_legacy_dec(max_rate_str)
    except DecimalFormatError as exc:
        raise DecimalFormatError(f"invalid commission max rate: {exc}") from exc
    try:
        max_change_rate = parse_legacy_dec(max_change_rate_str)
    except DecimalFormatError as exc:
        raise DecimalFormatError(f"invalid commission max change rate: {exc}") from exc
    return new_commission_rates(rate, max_rate, max_change_rate)