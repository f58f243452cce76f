"""Time and urgency surcharges.

Surcharges compound: each one is a percentage of the running total after the
previous one was added, and every delta is rounded on its own. The order is
fixed (tier, night, Sunday/holiday, extended session, emergency) so that a
quote can be reproduced exactly from the same inputs.
"""

import re
from dataclasses import dataclass, field
from math import floor

NIGHT_START_HOUR = 18
NIGHT_END_HOUR = 7

EMERGENCY_URGENCIES = frozenset({"urgent", "emergency"})

SUNDAY_HOLIDAY_PERCENTAGE = 10
EXTENDED_SESSION_PERCENTAGE = 10

_HOUR_PATTERN = re.compile(r"^\s*(\d{1,2})(?::\d{2})?")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, as the booking UI does."""
    return int(floor(value + 0.5))


def parse_hour(preferred_time: str | None) -> int | None:
    """Return the hour of an ``HH:MM`` string, or None if there isn't one."""
    if not preferred_time:
        return None
    match = _HOUR_PATTERN.match(preferred_time)
    if match is None:
        return None
    hour = int(match.group(1))
    if hour > 23:
        return None
    return hour


def is_night(
    preferred_time: str | None,
    start_hour: int = NIGHT_START_HOUR,
    end_hour: int = NIGHT_END_HOUR,
) -> bool:
    """True when the preferred time falls in the window wrapping midnight."""
    hour = parse_hour(preferred_time)
    if hour is None:
        return False
    return hour >= start_hour or hour < end_hour


def is_emergency(urgency: str | None) -> bool:
    """Only the exact values "urgent" and "emergency" trigger the surcharge."""
    return urgency in EMERGENCY_URGENCIES


def _check_percentage(name: str, value: int) -> None:
    if not 0 <= value <= 100:
        raise ValueError(f"{name} must be between 0 and 100, got {value}")


@dataclass(frozen=True)
class SurchargeBreakdown:
    """Line items produced by apply_surcharges."""

    base_amount: int
    tier_delta: int
    night_delta: int = 0
    sunday_holiday_delta: int = 0
    extended_session_delta: int = 0
    emergency_delta: int = 0
    applied: list[str] = field(default_factory=list)

    @property
    def after_tier(self) -> int:
        return self.base_amount + self.tier_delta

    @property
    def total(self) -> int:
        return (
            self.after_tier
            + self.night_delta
            + self.sunday_holiday_delta
            + self.extended_session_delta
            + self.emergency_delta
        )


def apply_surcharges(
    base: float,
    *,
    tier_pct: int = 0,
    night_pct: int = 0,
    emergency_pct: int = 0,
    night: bool = False,
    emergency: bool = False,
    sunday_holiday: bool = False,
    extended_session: bool = False,
    night_label: str = "Night Duty",
) -> SurchargeBreakdown:
    """Apply the tier uplift and surcharges to a base price in sequence.

    ``night`` must already account for whether the service is eligible for a
    night surcharge at all.
    """
    if base < 0:
        raise ValueError("Base price must be non-negative")
    _check_percentage("tier_pct", tier_pct)
    _check_percentage("night_pct", night_pct)
    _check_percentage("emergency_pct", emergency_pct)

    base_amount = round_half_up(base)
    after_tier = round_half_up(base * (1 + tier_pct / 100))
    running = after_tier
    applied: list[str] = []

    night_delta = 0
    if night:
        night_delta = round_half_up(running * (night_pct / 100))
        running += night_delta
        applied.append(f"{night_label} (+{night_pct}%)")

    sunday_delta = 0
    if sunday_holiday:
        sunday_delta = round_half_up(running * (SUNDAY_HOLIDAY_PERCENTAGE / 100))
        running += sunday_delta
        applied.append(f"Sunday/Holiday (+{SUNDAY_HOLIDAY_PERCENTAGE}%)")

    extended_delta = 0
    if extended_session:
        extended_delta = round_half_up(running * (EXTENDED_SESSION_PERCENTAGE / 100))
        running += extended_delta
        applied.append(f"Extended Session (+{EXTENDED_SESSION_PERCENTAGE}%)")

    emergency_delta = 0
    if emergency:
        emergency_delta = round_half_up(running * (emergency_pct / 100))
        running += emergency_delta
        applied.append(f"Emergency/Urgent (+{emergency_pct}%)")

    return SurchargeBreakdown(
        base_amount=base_amount,
        tier_delta=after_tier - base_amount,
        night_delta=night_delta,
        sunday_holiday_delta=sunday_delta,
        extended_session_delta=extended_delta,
        emergency_delta=emergency_delta,
        applied=applied,
    )
