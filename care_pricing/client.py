"""HTTP client for the marketplace pricing endpoints.

Price lists and surcharge percentages are fetched once when a booking is
opened. A failed fetch never blocks the booking: surcharge percentages fall
back to configured defaults and a missing price list leaves the quote
unavailable. The ``fetch_*`` helpers make that substitution explicit by
returning a FetchResult that carries both the value used and the errors that
forced a fallback.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .catalog import ServiceKind
from .models import AmbulancePrice, PricingContext, ServicePrice, SurchargeConfig
from .settings import PricingAPISettings, Settings, SurchargeSettings
from .tiers import TierTable

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SERVICE_PRICES = TypeAdapter(list[ServicePrice])
_AMBULANCE_PRICES = TypeAdapter(list[AmbulancePrice])


class PricingClientError(Exception):
    """Base class for pricing endpoint failures."""


class PricingServiceError(PricingClientError):
    pass


class PricingTimeoutError(PricingClientError):
    pass


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Value to use plus the errors that replaced fetched data with defaults."""

    value: T
    errors: tuple[PricingClientError, ...] = field(default_factory=tuple)

    @property
    def is_fallback(self) -> bool:
        return bool(self.errors)


def surcharge_defaults(settings: SurchargeSettings) -> SurchargeConfig:
    """Surcharge config used when the backend settings cannot be fetched."""
    return SurchargeConfig(
        night_duty_percentage=settings.night_duty_percentage,
        emergency_percentage=settings.emergency_percentage,
        night_start_hour=settings.night_start_hour,
        night_end_hour=settings.night_end_hour,
    )


def parse_percentage(data: Any) -> int | None:
    """Read a dynamic-pricing setting.

    A disabled setting is 0%. A missing percentage is None, meaning the caller's
    default applies; an explicit 0 is kept.
    """
    if not isinstance(data, dict):
        raise PricingServiceError(f"Expected a JSON object, got {type(data).__name__}")
    if data.get("enabled") is False:
        return 0
    raw = data.get("percentage")
    if raw is None:
        return None
    try:
        percentage = int(raw)
    except (TypeError, ValueError) as e:
        raise PricingServiceError(f"Invalid percentage: {raw!r}") from e
    if not 0 <= percentage <= 100:
        raise PricingServiceError(f"Percentage out of range: {percentage}")
    return percentage


def _parse_list(adapter: TypeAdapter, data: Any) -> list:
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise PricingServiceError(f"Invalid price list: {e.error_count()} errors") from e


class PricingClient:
    """Client for the dynamic-pricing and price-list endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        endpoints: PricingAPISettings | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.endpoints = endpoints or PricingAPISettings(base_url=self.base_url)
        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(cls, settings: PricingAPISettings) -> PricingClient:
        return cls(settings.base_url, timeout=settings.timeout, endpoints=settings)

    @property
    def client(self) -> httpx.Client:
        """Sync HTTP client, opened on first sync request."""
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _price_list_path(self, kind: ServiceKind) -> str:
        if kind == ServiceKind.NURSING:
            return self.endpoints.nursing_prices_path
        if kind == ServiceKind.PHYSIOTHERAPY:
            return self.endpoints.physiotherapy_prices_path
        raise ValueError(f"No flat price list for {kind.value}")

    def _get_json(self, path: str) -> Any:
        try:
            response = self.client.get(path)

            if response.status_code >= 500:
                raise PricingServiceError(f"Pricing server error: {response.status_code}")
            response.raise_for_status()

            return response.json()

        except httpx.TimeoutException as e:
            raise PricingTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise PricingServiceError(f"Unexpected status: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PricingServiceError(f"Network error: {e}") from e
        except ValueError as e:
            raise PricingServiceError(f"Invalid JSON from {path}") from e

    async def _get_json_async(self, path: str) -> Any:
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
                response = await client.get(path)

                if response.status_code >= 500:
                    raise PricingServiceError(f"Pricing server error: {response.status_code}")
                response.raise_for_status()

                return response.json()

        except httpx.TimeoutException as e:
            raise PricingTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise PricingServiceError(f"Unexpected status: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PricingServiceError(f"Network error: {e}") from e
        except ValueError as e:
            raise PricingServiceError(f"Invalid JSON from {path}") from e

    def get_night_duty_percentage(self) -> int | None:
        return parse_percentage(self._get_json(self.endpoints.night_duty_path))

    def get_emergency_percentage(self) -> int | None:
        return parse_percentage(self._get_json(self.endpoints.emergency_path))

    def get_service_prices(self, kind: ServiceKind) -> list[ServicePrice]:
        """Fetch the nursing or physiotherapy price list."""
        return _parse_list(_SERVICE_PRICES, self._get_json(self._price_list_path(kind)))

    def get_ambulance_prices(self) -> list[AmbulancePrice]:
        return _parse_list(_AMBULANCE_PRICES, self._get_json(self.endpoints.ambulance_prices_path))

    async def get_night_duty_percentage_async(self) -> int | None:
        return parse_percentage(await self._get_json_async(self.endpoints.night_duty_path))

    async def get_emergency_percentage_async(self) -> int | None:
        return parse_percentage(await self._get_json_async(self.endpoints.emergency_path))

    async def get_service_prices_async(self, kind: ServiceKind) -> list[ServicePrice]:
        data = await self._get_json_async(self._price_list_path(kind))
        return _parse_list(_SERVICE_PRICES, data)

    async def get_ambulance_prices_async(self) -> list[AmbulancePrice]:
        data = await self._get_json_async(self.endpoints.ambulance_prices_path)
        return _parse_list(_AMBULANCE_PRICES, data)

    def close(self) -> None:
        """Close the sync HTTP client if one was opened."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> PricingClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _resolve_percentage(
    name: str, outcome: int | None | BaseException, default: int
) -> tuple[int, PricingClientError | None]:
    if isinstance(outcome, PricingClientError):
        logger.warning("Falling back to default %s surcharge of %d%%: %s", name, default, outcome)
        return default, outcome
    if isinstance(outcome, BaseException):
        raise outcome
    return (default if outcome is None else outcome), None


def _combine_surcharges(
    night: int | None | BaseException,
    emergency: int | None | BaseException,
    defaults: SurchargeConfig,
) -> FetchResult[SurchargeConfig]:
    night_pct, night_error = _resolve_percentage("night duty", night, defaults.night_duty_percentage)
    emergency_pct, emergency_error = _resolve_percentage(
        "emergency", emergency, defaults.emergency_percentage
    )
    config = defaults.model_copy(
        update={"night_duty_percentage": night_pct, "emergency_percentage": emergency_pct}
    )
    errors = tuple(e for e in (night_error, emergency_error) if e is not None)
    return FetchResult(value=config, errors=errors)


def _call(func, *args) -> Any:
    try:
        return func(*args)
    except PricingClientError as e:
        return e


def fetch_surcharge_config(
    client: PricingClient, defaults: SurchargeConfig | None = None
) -> FetchResult[SurchargeConfig]:
    """Fetch both surcharge percentages, substituting defaults for failures.

    Each percentage is fetched and defaulted independently.
    """
    defaults = defaults or SurchargeConfig()
    night = _call(client.get_night_duty_percentage)
    emergency = _call(client.get_emergency_percentage)
    return _combine_surcharges(night, emergency, defaults)


async def fetch_surcharge_config_async(
    client: PricingClient, defaults: SurchargeConfig | None = None
) -> FetchResult[SurchargeConfig]:
    defaults = defaults or SurchargeConfig()
    night, emergency = await asyncio.gather(
        client.get_night_duty_percentage_async(),
        client.get_emergency_percentage_async(),
        return_exceptions=True,
    )
    return _combine_surcharges(night, emergency, defaults)


def _resolve_list(name: str, outcome: list | BaseException) -> FetchResult[list]:
    if isinstance(outcome, PricingClientError):
        logger.warning("Could not load %s prices, quotes will show as loading: %s", name, outcome)
        return FetchResult(value=[], errors=(outcome,))
    if isinstance(outcome, BaseException):
        raise outcome
    return FetchResult(value=outcome)


def fetch_price_lists(client: PricingClient) -> dict[str, FetchResult[list]]:
    """Fetch every price list; a failed list is empty."""
    return {
        "nursing": _resolve_list(
            "nursing", _call(client.get_service_prices, ServiceKind.NURSING)
        ),
        "physiotherapy": _resolve_list(
            "physiotherapy", _call(client.get_service_prices, ServiceKind.PHYSIOTHERAPY)
        ),
        "ambulance": _resolve_list("ambulance", _call(client.get_ambulance_prices)),
    }


async def fetch_price_lists_async(client: PricingClient) -> dict[str, FetchResult[list]]:
    nursing, physiotherapy, ambulance = await asyncio.gather(
        client.get_service_prices_async(ServiceKind.NURSING),
        client.get_service_prices_async(ServiceKind.PHYSIOTHERAPY),
        client.get_ambulance_prices_async(),
        return_exceptions=True,
    )
    return {
        "nursing": _resolve_list("nursing", nursing),
        "physiotherapy": _resolve_list("physiotherapy", physiotherapy),
        "ambulance": _resolve_list("ambulance", ambulance),
    }


def _build_context(
    surcharges: FetchResult[SurchargeConfig],
    price_lists: dict[str, FetchResult[list]],
    settings: Settings,
) -> PricingContext:
    return PricingContext(
        surcharges=surcharges.value,
        nursing_prices=price_lists["nursing"].value,
        physiotherapy_prices=price_lists["physiotherapy"].value,
        ambulance_prices=price_lists["ambulance"].value,
        tier_table=TierTable.from_settings(settings.tiers),
    )


def load_pricing_context(client: PricingClient, settings: Settings) -> PricingContext:
    """Fetch everything a booking session needs to quote."""
    surcharges = fetch_surcharge_config(client, surcharge_defaults(settings.surcharges))
    price_lists = fetch_price_lists(client)
    return _build_context(surcharges, price_lists, settings)


async def load_pricing_context_async(client: PricingClient, settings: Settings) -> PricingContext:
    surcharges, price_lists = await asyncio.gather(
        fetch_surcharge_config_async(client, surcharge_defaults(settings.surcharges)),
        fetch_price_lists_async(client),
    )
    return _build_context(surcharges, price_lists, settings)
