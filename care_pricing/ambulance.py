"""Ambulance fare assembly.

An ambulance fare starts from a minimum fare that covers the first
``minimum_km`` kilometers, adds a per-km charge for the rest of the trip, and
then goes through the same tier and surcharge sequence as flat-priced
services, with a "night service" charge in place of night duty.
"""

import logging
from dataclasses import dataclass

from .geo import calculate_distance
from .models import (
    AmbulanceBreakdown,
    AmbulancePrice,
    BookingInputs,
    Estimate,
    EstimateUnavailable,
    GeoPoint,
    SurchargeConfig,
    UnavailableReason,
)
from .surcharges import apply_surcharges, is_emergency, is_night, round_half_up
from .tiers import DEFAULT_TIER_TABLE, TierTable, classify_city

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmbulanceBaseFare:
    """Fare before tier and surcharges."""

    distance_km: float
    extra_km: float
    extra_km_charge: int
    base_fare: float


def ambulance_base_fare(price: AmbulancePrice, distance_km: float) -> AmbulanceBaseFare:
    """Compute the distance-based base fare for a trip."""
    if distance_km < 0:
        raise ValueError("Distance must be non-negative")

    extra_km = max(0.0, distance_km - price.minimum_km)
    extra_km_charge = round_half_up(extra_km * price.per_km_charge)
    return AmbulanceBaseFare(
        distance_km=distance_km,
        extra_km=extra_km,
        extra_km_charge=extra_km_charge,
        base_fare=price.minimum_fare + extra_km_charge,
    )


def assemble_ambulance_fare(
    price: AmbulancePrice,
    pickup: GeoPoint | None,
    dropoff: GeoPoint | None,
    *,
    pickup_address: str | None = None,
    preferred_time: str | None = None,
    urgency: str = "normal",
    surcharges: SurchargeConfig | None = None,
    tier_table: TierTable = DEFAULT_TIER_TABLE,
) -> Estimate | EstimateUnavailable:
    """Quote an ambulance trip between two map points.

    Without both points there is no distance, and the fare is reported as
    unavailable rather than as a misleadingly low number.
    """
    distance_km = calculate_distance(pickup, dropoff)
    if distance_km is None:
        return EstimateUnavailable(reason=UnavailableReason.MISSING_LOCATION)

    surcharges = surcharges or SurchargeConfig()
    base = ambulance_base_fare(price, distance_km)
    tier = classify_city(pickup_address, tier_table)
    night = is_night(preferred_time, surcharges.night_start_hour, surcharges.night_end_hour)
    emergency = is_emergency(urgency)

    breakdown = apply_surcharges(
        base.base_fare,
        tier_pct=tier.percentage,
        night_pct=surcharges.night_duty_percentage,
        emergency_pct=surcharges.emergency_percentage,
        night=night,
        emergency=emergency,
        night_label="Night Service",
    )

    logger.debug(
        "Ambulance fare for %s: %.1f km, base %s, total %d",
        price.service_name,
        distance_km,
        base.base_fare,
        breakdown.total,
    )

    return Estimate(
        base_amount=breakdown.base_amount,
        tier_adjustment=breakdown.tier_delta,
        night_or_distance_charge=breakdown.night_delta,
        emergency_charge=breakdown.emergency_delta,
        total=breakdown.total,
        tier=tier,
        tier_percentage=tier.percentage,
        night_percentage=surcharges.night_duty_percentage if night else None,
        emergency_percentage=surcharges.emergency_percentage if emergency else None,
        applied=breakdown.applied,
        ambulance=AmbulanceBreakdown(
            distance_km=distance_km,
            minimum_fare=price.minimum_fare,
            minimum_km=price.minimum_km,
            extra_km=base.extra_km,
            extra_km_charge=base.extra_km_charge,
        ),
    )


def quote_ambulance(
    inputs: BookingInputs,
    price: AmbulancePrice,
    surcharges: SurchargeConfig,
    tier_table: TierTable = DEFAULT_TIER_TABLE,
) -> Estimate | EstimateUnavailable:
    """Quote an ambulance booking from the booking form snapshot."""
    return assemble_ambulance_fare(
        price,
        inputs.pickup,
        inputs.dropoff,
        pickup_address=inputs.pickup_address,
        preferred_time=inputs.preferred_time,
        urgency=inputs.urgency,
        surcharges=surcharges,
        tier_table=tier_table,
    )
