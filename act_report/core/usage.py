"""
Usage record normalization.

Turns raw per-server statistics from the billing API into minutes,
per-minute rate and earnings. Arithmetic is exact (Decimal), no rounding
happens at this stage.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, DecimalException, InvalidOperation
from enum import Enum
from typing import Any, Iterable, List

from .errors import MalformedEntry

logger = logging.getLogger(__name__)

# Rate used by deployments whose API does not report playtime_cost
DEFAULT_FIXED_RATE = Decimal("0.30")


class RateSource(Enum):
    """Where the per-minute rate comes from."""
    API = "api"
    FIXED = "fixed"


class MalformedPolicy(Enum):
    """What to do with a statistics record that fails validation."""
    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class RawUsageEntry:
    """One server's statistics exactly as the API reported them.

    Values are kept unvalidated; normalization decides what is acceptable.
    """
    vm_name: Any
    session_seconds: Any
    playtime_cost: Any = None


@dataclass(frozen=True)
class NormalizedUsage:
    """Validated usage of a single virtual machine."""
    vm_name: str
    minutes: int
    cost_per_minute: Decimal
    earnings: Decimal


def parse_raw_entry(payload: Any) -> RawUsageEntry:
    """Build a RawUsageEntry from one JSON object of the statistics response.

    Raises:
        MalformedEntry: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise MalformedEntry(f"Statistics entry must be an object, got {type(payload).__name__}", payload)
    return RawUsageEntry(
        vm_name=payload.get("vm_name"),
        session_seconds=payload.get("session_seconds"),
        playtime_cost=payload.get("playtime_cost"),
    )


def _to_decimal(value: Any, field_name: str, raw: RawUsageEntry) -> Decimal:
    """Coerce a JSON number or numeric string into a non-negative finite Decimal."""
    if value is None:
        raise MalformedEntry(f"'{field_name}' is missing", raw)
    # bool is an int subclass, but true/false are never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise MalformedEntry(f"'{field_name}' must be numeric, got {value!r}", raw)

    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise MalformedEntry(f"'{field_name}' must be numeric, got {value!r}", raw)

    if not number.is_finite():
        raise MalformedEntry(f"'{field_name}' must be finite, got {value!r}", raw)
    if number < 0:
        raise MalformedEntry(f"'{field_name}' must be >= 0, got {value!r}", raw)
    return number


def normalize_entry(
    raw: RawUsageEntry,
    rate_source: RateSource = RateSource.API,
    fixed_rate: Decimal = DEFAULT_FIXED_RATE
) -> NormalizedUsage:
    """Normalize one statistics record.

    Args:
        raw: Entry as reported by the API
        rate_source: Use the API's playtime_cost or the fixed rate
        fixed_rate: Per-minute rate for RateSource.FIXED

    Returns:
        NormalizedUsage with minutes = floor(seconds / 60) and
        earnings = minutes * cost_per_minute

    Raises:
        MalformedEntry: If the name is missing or a numeric field is invalid
    """
    if not isinstance(raw.vm_name, str) or not raw.vm_name.strip():
        raise MalformedEntry(f"'vm_name' is missing or empty: {raw.vm_name!r}", raw)

    seconds = _to_decimal(raw.session_seconds, "session_seconds", raw)
    try:
        minutes = int(seconds // 60)
    except DecimalException:
        raise MalformedEntry(f"'session_seconds' is out of range: {raw.session_seconds!r}", raw)

    if rate_source == RateSource.FIXED:
        cost_per_minute = Decimal(str(fixed_rate))
    else:
        cost_per_minute = _to_decimal(raw.playtime_cost, "playtime_cost", raw)

    try:
        earnings = minutes * cost_per_minute
    except DecimalException:
        raise MalformedEntry(f"'playtime_cost' is out of range: {raw.playtime_cost!r}", raw)

    return NormalizedUsage(
        vm_name=raw.vm_name,
        minutes=minutes,
        cost_per_minute=cost_per_minute,
        earnings=earnings
    )


def normalize_entries(
    raws: Iterable[RawUsageEntry],
    rate_source: RateSource = RateSource.API,
    fixed_rate: Decimal = DEFAULT_FIXED_RATE,
    on_malformed: MalformedPolicy = MalformedPolicy.ABORT
) -> List[NormalizedUsage]:
    """Normalize a sequence of entries, preserving their order.

    With MalformedPolicy.ABORT the first invalid entry stops the run;
    with MalformedPolicy.SKIP it is logged and dropped.
    """
    usages = []
    for position, raw in enumerate(raws, start=1):
        try:
            usages.append(normalize_entry(raw, rate_source, fixed_rate))
        except MalformedEntry as e:
            if on_malformed == MalformedPolicy.SKIP:
                logger.warning("Skipping statistics entry #%d: %s", position, e)
                continue
            logger.error("Invalid statistics entry #%d: %s", position, e)
            raise
    return usages

