"""Pricing data model: inputs, price rules, surcharge settings and estimates."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .tiers import DEFAULT_TIER_TABLE, CityTier, TierTable


class GeoPoint(BaseModel):
    """A location picked on the map, in decimal degrees."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    model_config = ConfigDict(frozen=True)


class BillingFrequency(str, Enum):
    PER_VISIT = "per_visit"
    MONTHLY = "monthly"


class AmbulancePrice(BaseModel):
    """Distance-based price rule for an ambulance service."""

    id: int | None = None
    service_name: str
    minimum_fare: float = Field(ge=0)
    minimum_km: float = Field(ge=0)
    per_km_charge: float = Field(ge=0)
    description: str = ""
    is_active: bool = True

    model_config = ConfigDict(extra="ignore")


class ServicePrice(BaseModel):
    """Flat price rule for a nursing or physiotherapy service.

    Physiotherapy price lists call the per-visit field ``per_session_price``;
    both names are accepted.
    """

    id: int | None = None
    service_name: str
    per_visit_price: float = Field(
        ge=0,
        validation_alias=AliasChoices("per_visit_price", "per_session_price"),
    )
    monthly_price: float | None = Field(default=None, ge=0)
    description: str = ""
    is_active: bool = True

    model_config = ConfigDict(extra="ignore")


class SurchargeConfig(BaseModel):
    """Global surcharge percentages set by the marketplace admins."""

    night_duty_percentage: int = Field(default=20, ge=0, le=100)
    emergency_percentage: int = Field(default=15, ge=0, le=100)
    night_start_hour: int = Field(default=18, ge=0, le=23)
    night_end_hour: int = Field(default=7, ge=0, le=23)

    model_config = ConfigDict(frozen=True)


class AmbulanceBreakdown(BaseModel):
    """Distance part of an ambulance quote."""

    distance_km: float = Field(ge=0)
    minimum_fare: float = Field(ge=0)
    minimum_km: float = Field(ge=0)
    extra_km: float = Field(ge=0)
    extra_km_charge: int = Field(ge=0)


class Estimate(BaseModel):
    """Advisory price breakdown shown before a booking is submitted.

    Every line item is rounded on its own, and ``total`` is always the sum
    of the line items.
    """

    base_amount: int = Field(ge=0)
    tier_adjustment: int = Field(ge=0)
    night_or_distance_charge: int = Field(default=0, ge=0)
    sunday_holiday_charge: int = Field(default=0, ge=0)
    extended_session_charge: int = Field(default=0, ge=0)
    emergency_charge: int = Field(default=0, ge=0)
    total: int = Field(ge=0)

    tier: CityTier = CityTier.TIER_3
    tier_percentage: int = Field(default=0, ge=0)
    night_percentage: int | None = None
    emergency_percentage: int | None = None
    applied: list[str] = Field(default_factory=list)
    billing_frequency: BillingFrequency = BillingFrequency.PER_VISIT
    monthly_visits_count: int = Field(default=1, ge=1)
    ambulance: AmbulanceBreakdown | None = None

    @model_validator(mode="after")
    def validate_total(self) -> "Estimate":
        line_items = (
            self.base_amount
            + self.tier_adjustment
            + self.night_or_distance_charge
            + self.sunday_holiday_charge
            + self.extended_session_charge
            + self.emergency_charge
        )
        if line_items != self.total:
            raise ValueError(f"total ({self.total}) must equal the sum of line items ({line_items})")
        return self


class UnavailableReason(str, Enum):
    """Why a quote cannot be shown yet."""

    MISSING_LOCATION = "missing_location"
    PRICE_LOADING = "price_loading"
    NOT_PRICED = "not_priced"


UNAVAILABLE_MESSAGES: dict[UnavailableReason, str] = {
    UnavailableReason.MISSING_LOCATION: "Select both pickup and drop-off locations to see the fare.",
    UnavailableReason.PRICE_LOADING: (
        "Price information is being loaded. Please continue with booking."
    ),
    UnavailableReason.NOT_PRICED: "The provider will share a quote after reviewing your request.",
}


class EstimateUnavailable(BaseModel):
    """Returned instead of an Estimate when no number can honestly be shown."""

    reason: UnavailableReason
    message: str = ""

    @model_validator(mode="after")
    def default_message(self) -> "EstimateUnavailable":
        if not self.message:
            self.message = UNAVAILABLE_MESSAGES[self.reason]
        return self


class BookingInputs(BaseModel):
    """Snapshot of the booking form fields that affect the quote."""

    service_title: str
    service_name: str
    service_description: str | None = None
    city: str | None = None
    address: str | None = None
    pickup_address: str | None = None
    preferred_time: str | None = Field(default=None, description="HH:MM, 24-hour")
    urgency: str = "normal"
    billing_frequency: BillingFrequency = BillingFrequency.PER_VISIT
    monthly_visits_count: int = Field(default=1, ge=1)
    location: GeoPoint | None = None
    pickup: GeoPoint | None = None
    dropoff: GeoPoint | None = None
    is_sunday_holiday: bool = False
    is_extended_session: bool = False


class PricingContext(BaseModel):
    """Price data fetched once per booking session and passed to every quote."""

    surcharges: SurchargeConfig = Field(default_factory=SurchargeConfig)
    nursing_prices: list[ServicePrice] = Field(default_factory=list)
    physiotherapy_prices: list[ServicePrice] = Field(default_factory=list)
    ambulance_prices: list[AmbulancePrice] = Field(default_factory=list)
    tier_table: TierTable = DEFAULT_TIER_TABLE
