"""Quote estimation for a booking form snapshot.

``estimate`` is a pure function of its two arguments: the booking inputs and
the pricing context fetched when the booking was opened. It is re-run on every
input change; nothing is cached between calls.
"""

import logging
from typing import Any

from .ambulance import quote_ambulance
from .catalog import (
    NIGHT_SURCHARGE_KINDS,
    ServiceKind,
    classify_service,
    find_ambulance_price,
    find_service_price,
    select_base_price,
)
from .models import (
    BookingInputs,
    Estimate,
    EstimateUnavailable,
    PricingContext,
    ServicePrice,
    UnavailableReason,
)
from .surcharges import apply_surcharges, is_emergency, is_night
from .tiers import classify_city

logger = logging.getLogger(__name__)


def estimate(inputs: BookingInputs, context: PricingContext) -> Estimate | EstimateUnavailable:
    """Return the advisory quote for a booking, or why none can be shown."""
    kind = classify_service(inputs.service_title)

    if kind == ServiceKind.AMBULANCE:
        if inputs.pickup is None or inputs.dropoff is None:
            return EstimateUnavailable(reason=UnavailableReason.MISSING_LOCATION)
        ambulance_price = find_ambulance_price(context.ambulance_prices, inputs.service_name)
        if ambulance_price is None:
            logger.debug("No ambulance price rule for %r", inputs.service_name)
            return EstimateUnavailable(reason=UnavailableReason.PRICE_LOADING)
        return quote_ambulance(inputs, ambulance_price, context.surcharges, context.tier_table)

    if kind in (ServiceKind.NURSING, ServiceKind.PHYSIOTHERAPY):
        prices = (
            context.nursing_prices if kind == ServiceKind.NURSING else context.physiotherapy_prices
        )
        rule = find_service_price(prices, inputs.service_name, inputs.service_description)
        if rule is None:
            logger.debug("No %s price rule for %r", kind.value, inputs.service_name)
            return EstimateUnavailable(reason=UnavailableReason.PRICE_LOADING)
        return _quote_visit(inputs, context, kind, rule)

    return EstimateUnavailable(reason=UnavailableReason.NOT_PRICED)


def _quote_visit(
    inputs: BookingInputs,
    context: PricingContext,
    kind: ServiceKind,
    rule: ServicePrice,
) -> Estimate:
    surcharges = context.surcharges
    base_price = select_base_price(rule, inputs.billing_frequency)
    tier = classify_city(inputs.city, context.tier_table)
    night = kind in NIGHT_SURCHARGE_KINDS and is_night(
        inputs.preferred_time, surcharges.night_start_hour, surcharges.night_end_hour
    )
    emergency = is_emergency(inputs.urgency)
    physiotherapy = kind == ServiceKind.PHYSIOTHERAPY

    breakdown = apply_surcharges(
        base_price,
        tier_pct=tier.percentage,
        night_pct=surcharges.night_duty_percentage,
        emergency_pct=surcharges.emergency_percentage,
        night=night,
        emergency=emergency,
        sunday_holiday=physiotherapy and inputs.is_sunday_holiday,
        extended_session=physiotherapy and inputs.is_extended_session,
    )

    logger.debug(
        "Quoted %s %r at %d (%s)",
        kind.value,
        rule.service_name,
        breakdown.total,
        inputs.billing_frequency.value,
    )

    return Estimate(
        base_amount=breakdown.base_amount,
        tier_adjustment=breakdown.tier_delta,
        night_or_distance_charge=breakdown.night_delta,
        sunday_holiday_charge=breakdown.sunday_holiday_delta,
        extended_session_charge=breakdown.extended_session_delta,
        emergency_charge=breakdown.emergency_delta,
        total=breakdown.total,
        tier=tier,
        tier_percentage=tier.percentage,
        night_percentage=surcharges.night_duty_percentage if night else None,
        emergency_percentage=surcharges.emergency_percentage if emergency else None,
        applied=breakdown.applied,
        billing_frequency=inputs.billing_frequency,
        monthly_visits_count=inputs.monthly_visits_count,
    )


def build_booking_payload(
    inputs: BookingInputs,
    service_type: str,
    service_category: str,
    **form_fields: Any,
) -> dict[str, Any]:
    """Build the booking request body submitted to the backend.

    The body carries the raw inputs only; the backend prices the booking
    itself, so no client estimate is included.
    """
    payload: dict[str, Any] = {
        "service_type": service_type,
        "service_category": service_category,
        "city": inputs.city or "",
        "address": inputs.address or "",
        "pickup_address": inputs.pickup_address or "",
        "preferred_time": inputs.preferred_time or "",
        "urgency": inputs.urgency,
        "billing_frequency": inputs.billing_frequency.value,
        "monthly_visits_count": inputs.monthly_visits_count,
        "is_sunday_holiday": inputs.is_sunday_holiday,
        "is_extended_session": inputs.is_extended_session,
    }
    for prefix, point in (("", inputs.location), ("pickup_", inputs.pickup), ("dropoff_", inputs.dropoff)):
        payload[f"{prefix}latitude"] = point.latitude if point else None
        payload[f"{prefix}longitude"] = point.longitude if point else None
    payload.update(form_fields)
    return payload
