"""Service classification and price-rule lookup."""

from collections.abc import Iterable
from enum import Enum

from .models import AmbulancePrice, BillingFrequency, ServicePrice


class ServiceKind(str, Enum):
    """Pricing path a booked service takes."""

    NURSING = "nursing"
    PHYSIOTHERAPY = "physiotherapy"
    AMBULANCE = "ambulance"
    EQUIPMENT_RENTAL = "equipment_rental"
    OTHER = "other"


# Services whose quotes carry the night surcharge. Physiotherapy sessions are
# daytime appointments and are quoted without it.
NIGHT_SURCHARGE_KINDS = frozenset({ServiceKind.NURSING, ServiceKind.AMBULANCE})


def classify_service(service_title: str) -> ServiceKind:
    """Classify a marketplace service by its title."""
    title = service_title.lower().strip()
    if "nursing" in title:
        return ServiceKind.NURSING
    if "physiotherapy" in title or "physio" in title:
        return ServiceKind.PHYSIOTHERAPY
    if "ambulance" in title:
        return ServiceKind.AMBULANCE
    if "equipment" in title and "rental" in title:
        return ServiceKind.EQUIPMENT_RENTAL
    return ServiceKind.OTHER


def name_variations(service_name: str, description: str | None = None) -> list[str]:
    """Spellings tried, in order, when matching a service type to a price rule."""
    variations = [service_name, service_name.lower(), service_name.upper()]
    if description:
        variations.append(description)
    variations.extend(word.capitalize() for word in service_name.split(" ") if word)
    return variations


def find_service_price(
    prices: Iterable[ServicePrice],
    service_name: str,
    description: str | None = None,
) -> ServicePrice | None:
    """Return the active price rule for a nursing or physiotherapy service."""
    active = [price for price in prices if price.is_active]
    for name in name_variations(service_name, description):
        for price in active:
            if price.service_name == name:
                return price
    return None


def find_ambulance_price(
    prices: Iterable[AmbulancePrice], service_name: str
) -> AmbulancePrice | None:
    """Return the active price rule for an ambulance service."""
    for price in prices:
        if price.is_active and price.service_name == service_name:
            return price
    return None


def select_base_price(rule: ServicePrice, billing_frequency: BillingFrequency) -> float:
    """Monthly package price when chosen and offered, otherwise the per-visit price."""
    if billing_frequency == BillingFrequency.MONTHLY and rule.monthly_price:
        return rule.monthly_price
    return rule.per_visit_price
