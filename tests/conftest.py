import pytest

from care_pricing.models import (
    AmbulancePrice,
    PricingContext,
    ServicePrice,
    SurchargeConfig,
)


@pytest.fixture
def surcharges() -> SurchargeConfig:
    return SurchargeConfig(night_duty_percentage=20, emergency_percentage=15)


@pytest.fixture
def nursing_prices() -> list[ServicePrice]:
    return [
        ServicePrice(
            id=1,
            service_name="Injection / IV / Simple Procedure",
            per_visit_price=400,
            description="IM/IV/SC injection, basic assistance",
        ),
        ServicePrice(id=2, service_name="Vitals Check", per_visit_price=300),
        ServicePrice(
            id=3,
            service_name="Elderly Care",
            per_visit_price=800,
            monthly_price=18000,
        ),
        ServicePrice(id=4, service_name="Wound Dressing", per_visit_price=500, is_active=False),
    ]


@pytest.fixture
def physiotherapy_prices() -> list[ServicePrice]:
    return [
        ServicePrice.model_validate(
            {
                "id": 1,
                "service_name": "Post-Surgery Rehab",
                "per_session_price": 400,
                "monthly_price": 9000,
            }
        ),
        ServicePrice.model_validate(
            {"id": 2, "service_name": "Sports Injury", "per_session_price": 500}
        ),
    ]


@pytest.fixture
def ambulance_prices() -> list[AmbulancePrice]:
    return [
        AmbulancePrice(
            id=1,
            service_name="Basic Life Support",
            minimum_fare=300,
            minimum_km=5,
            per_km_charge=20,
        ),
        AmbulancePrice(
            id=2,
            service_name="Advanced Life Support",
            minimum_fare=1500,
            minimum_km=10,
            per_km_charge=35,
        ),
    ]


@pytest.fixture
def pricing_context(
    surcharges, nursing_prices, physiotherapy_prices, ambulance_prices
) -> PricingContext:
    return PricingContext(
        surcharges=surcharges,
        nursing_prices=nursing_prices,
        physiotherapy_prices=physiotherapy_prices,
        ambulance_prices=ambulance_prices,
    )
