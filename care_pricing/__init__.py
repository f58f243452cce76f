"""Advisory price estimates for home-care and ambulance bookings."""

from .ambulance import ambulance_base_fare, assemble_ambulance_fare
from .catalog import ServiceKind, classify_service
from .client import FetchResult, PricingClient, load_pricing_context
from .estimator import build_booking_payload, estimate
from .geo import calculate_distance, haversine_km
from .models import (
    AmbulancePrice,
    BillingFrequency,
    BookingInputs,
    Estimate,
    EstimateUnavailable,
    GeoPoint,
    PricingContext,
    ServicePrice,
    SurchargeConfig,
    UnavailableReason,
)
from .surcharges import apply_surcharges, is_emergency, is_night
from .tiers import CityTier, TierTable, classify_city, tier_percentage

__all__ = [
    "AmbulancePrice",
    "BillingFrequency",
    "BookingInputs",
    "CityTier",
    "Estimate",
    "EstimateUnavailable",
    "FetchResult",
    "GeoPoint",
    "PricingClient",
    "PricingContext",
    "ServiceKind",
    "ServicePrice",
    "SurchargeConfig",
    "TierTable",
    "UnavailableReason",
    "ambulance_base_fare",
    "apply_surcharges",
    "assemble_ambulance_fare",
    "build_booking_payload",
    "calculate_distance",
    "classify_city",
    "classify_service",
    "estimate",
    "haversine_km",
    "is_emergency",
    "is_night",
    "load_pricing_context",
    "tier_percentage",
]
