"""Tests for the pricing endpoint client."""

import logging

import httpx
import pytest
import respx
from httpx import Response

from care_pricing.catalog import ServiceKind
from care_pricing.client import (
    PricingClient,
    PricingServiceError,
    PricingTimeoutError,
    fetch_price_lists,
    fetch_price_lists_async,
    fetch_surcharge_config,
    fetch_surcharge_config_async,
    load_pricing_context,
    load_pricing_context_async,
    parse_percentage,
)
from care_pricing.models import SurchargeConfig
from care_pricing.settings import Settings, TierSettings

BASE_URL = "http://pricing.test"

NIGHT_DUTY = "/api/admin/dynamic-pricing/night-duty"
EMERGENCY = "/api/admin/dynamic-pricing/emergency"
NURSING = "/api/nursing-prices"
PHYSIOTHERAPY = "/api/physiotherapy-prices"
AMBULANCE = "/api/ambulance-prices"

NURSING_BODY = [
    {"id": 1, "service_name": "Vitals Check", "per_visit_price": 300, "is_active": True},
]
PHYSIOTHERAPY_BODY = [
    {"id": 1, "service_name": "Sports Injury", "per_session_price": "500.00", "is_active": True},
]
AMBULANCE_BODY = [
    {
        "id": 1,
        "service_name": "Basic Life Support",
        "minimum_fare": "300.00",
        "minimum_km": 5,
        "per_km_charge": "20.00",
        "is_active": True,
        "created_at": "2025-01-01T00:00:00Z",
    },
]


@pytest.fixture
def client():
    pricing_client = PricingClient(base_url=BASE_URL, timeout=2.0)
    yield pricing_client
    pricing_client.close()


@pytest.fixture
def mock_api():
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


def mock_all(mock_api, night=None, emergency=None) -> None:
    mock_api.get(NIGHT_DUTY).mock(
        return_value=night or Response(200, json={"enabled": True, "percentage": 25})
    )
    mock_api.get(EMERGENCY).mock(
        return_value=emergency or Response(200, json={"enabled": True, "percentage": 30})
    )
    mock_api.get(NURSING).mock(return_value=Response(200, json=NURSING_BODY))
    mock_api.get(PHYSIOTHERAPY).mock(return_value=Response(200, json=PHYSIOTHERAPY_BODY))
    mock_api.get(AMBULANCE).mock(return_value=Response(200, json=AMBULANCE_BODY))


@pytest.mark.unit
class TestParsePercentage:
    def test_enabled(self) -> None:
        assert parse_percentage({"enabled": True, "percentage": 25}) == 25

    def test_disabled_is_zero(self) -> None:
        assert parse_percentage({"enabled": False, "percentage": 25}) == 0

    def test_explicit_zero_kept(self) -> None:
        assert parse_percentage({"enabled": True, "percentage": 0}) == 0

    @pytest.mark.parametrize("data", [{}, {"enabled": True}, {"percentage": None}])
    def test_missing_percentage(self, data: dict) -> None:
        assert parse_percentage(data) is None

    def test_numeric_string(self) -> None:
        assert parse_percentage({"percentage": "18"}) == 18

    @pytest.mark.parametrize("data", [[], "20", {"percentage": "abc"}, {"percentage": 150}])
    def test_invalid(self, data) -> None:
        with pytest.raises(PricingServiceError):
            parse_percentage(data)


@pytest.mark.unit
class TestPricingClient:
    def test_night_duty_percentage(self, client: PricingClient, mock_api) -> None:
        route = mock_api.get(NIGHT_DUTY).mock(
            return_value=Response(200, json={"enabled": True, "percentage": 25})
        )

        assert client.get_night_duty_percentage() == 25
        assert route.called

    def test_service_prices_accepts_session_alias(
        self, client: PricingClient, mock_api
    ) -> None:
        mock_api.get(PHYSIOTHERAPY).mock(return_value=Response(200, json=PHYSIOTHERAPY_BODY))

        prices = client.get_service_prices(ServiceKind.PHYSIOTHERAPY)

        assert prices[0].service_name == "Sports Injury"
        assert prices[0].per_visit_price == 500

    def test_ambulance_prices_ignore_extra_fields(
        self, client: PricingClient, mock_api
    ) -> None:
        mock_api.get(AMBULANCE).mock(return_value=Response(200, json=AMBULANCE_BODY))

        prices = client.get_ambulance_prices()

        assert prices[0].minimum_fare == 300
        assert prices[0].per_km_charge == 20

    def test_no_price_list_for_ambulance_kind(self, client: PricingClient) -> None:
        with pytest.raises(ValueError, match="ambulance"):
            client.get_service_prices(ServiceKind.AMBULANCE)

    def test_server_error(self, client: PricingClient, mock_api) -> None:
        mock_api.get(NURSING).mock(return_value=Response(503))

        with pytest.raises(PricingServiceError, match="503"):
            client.get_service_prices(ServiceKind.NURSING)

    def test_client_error(self, client: PricingClient, mock_api) -> None:
        mock_api.get(NURSING).mock(return_value=Response(404))

        with pytest.raises(PricingServiceError, match="404"):
            client.get_service_prices(ServiceKind.NURSING)

    def test_timeout(self, client: PricingClient, mock_api) -> None:
        mock_api.get(EMERGENCY).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(PricingTimeoutError):
            client.get_emergency_percentage()

    def test_connection_error(self, client: PricingClient, mock_api) -> None:
        mock_api.get(EMERGENCY).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(PricingServiceError, match="Network error"):
            client.get_emergency_percentage()

    def test_invalid_json(self, client: PricingClient, mock_api) -> None:
        mock_api.get(AMBULANCE).mock(return_value=Response(200, content=b"<html>"))

        with pytest.raises(PricingServiceError, match="Invalid JSON"):
            client.get_ambulance_prices()

    def test_invalid_price_list(self, client: PricingClient, mock_api) -> None:
        mock_api.get(NURSING).mock(
            return_value=Response(200, json=[{"service_name": "Vitals Check"}])
        )

        with pytest.raises(PricingServiceError, match="Invalid price list"):
            client.get_service_prices(ServiceKind.NURSING)

    async def test_async_calls_open_no_sync_client(self, mock_api) -> None:
        mock_api.get(NIGHT_DUTY).mock(
            return_value=Response(200, json={"enabled": True, "percentage": 25})
        )
        pricing_client = PricingClient(base_url=BASE_URL)

        assert await pricing_client.get_night_duty_percentage_async() == 25
        assert pricing_client._client is None
        pricing_client.close()

    def test_sync_client_opened_on_first_request_and_closed(self, mock_api) -> None:
        mock_api.get(NIGHT_DUTY).mock(
            return_value=Response(200, json={"enabled": True, "percentage": 25})
        )
        pricing_client = PricingClient(base_url=BASE_URL)

        pricing_client.get_night_duty_percentage()
        http_client = pricing_client._client
        pricing_client.close()

        assert http_client is not None
        assert http_client.is_closed
        assert pricing_client._client is None

    def test_base_url_trailing_slash(self) -> None:
        with PricingClient(base_url=f"{BASE_URL}/") as pricing_client:
            assert pricing_client.base_url == BASE_URL

    async def test_async_percentage(self, client: PricingClient, mock_api) -> None:
        mock_api.get(EMERGENCY).mock(
            return_value=Response(200, json={"enabled": True, "percentage": 12})
        )

        assert await client.get_emergency_percentage_async() == 12

    async def test_async_timeout(self, client: PricingClient, mock_api) -> None:
        mock_api.get(AMBULANCE).mock(side_effect=httpx.ConnectTimeout("timed out"))

        with pytest.raises(PricingTimeoutError):
            await client.get_ambulance_prices_async()


@pytest.mark.unit
class TestFetchSurchargeConfig:
    def test_fetched_values(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api)

        result = fetch_surcharge_config(client)

        assert not result.is_fallback
        assert result.value.night_duty_percentage == 25
        assert result.value.emergency_percentage == 30

    def test_each_percentage_falls_back_independently(
        self, client: PricingClient, mock_api, caplog
    ) -> None:
        mock_all(mock_api, night=Response(500))

        with caplog.at_level(logging.WARNING, logger="care_pricing.client"):
            result = fetch_surcharge_config(client)

        assert result.is_fallback
        assert len(result.errors) == 1
        assert result.value.night_duty_percentage == 20
        assert result.value.emergency_percentage == 30
        assert "night duty" in caplog.text

    def test_custom_defaults(self, client: PricingClient, mock_api) -> None:
        mock_api.get(NIGHT_DUTY).mock(side_effect=httpx.ConnectError("refused"))
        mock_api.get(EMERGENCY).mock(side_effect=httpx.ConnectError("refused"))
        defaults = SurchargeConfig(night_duty_percentage=22, emergency_percentage=18)

        result = fetch_surcharge_config(client, defaults)

        assert len(result.errors) == 2
        assert result.value.night_duty_percentage == 22
        assert result.value.emergency_percentage == 18

    def test_missing_percentage_uses_default_without_error(
        self, client: PricingClient, mock_api
    ) -> None:
        mock_all(mock_api, night=Response(200, json={"enabled": True}))

        result = fetch_surcharge_config(client)

        assert not result.is_fallback
        assert result.value.night_duty_percentage == 20

    def test_disabled_setting(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api, emergency=Response(200, json={"enabled": False, "percentage": 15}))

        result = fetch_surcharge_config(client)

        assert result.value.emergency_percentage == 0

    async def test_async_fallback(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api, emergency=Response(502))

        result = await fetch_surcharge_config_async(client)

        assert result.value.night_duty_percentage == 25
        assert result.value.emergency_percentage == 15
        assert isinstance(result.errors[0], PricingServiceError)


@pytest.mark.unit
class TestFetchPriceLists:
    def test_all_lists(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api)

        lists = fetch_price_lists(client)

        assert [p.service_name for p in lists["nursing"].value] == ["Vitals Check"]
        assert [p.service_name for p in lists["physiotherapy"].value] == ["Sports Injury"]
        assert [p.service_name for p in lists["ambulance"].value] == ["Basic Life Support"]
        assert not any(result.is_fallback for result in lists.values())

    def test_failed_list_is_empty(self, client: PricingClient, mock_api, caplog) -> None:
        mock_all(mock_api)
        mock_api.get(AMBULANCE).mock(side_effect=httpx.ReadTimeout("timed out"))

        with caplog.at_level(logging.WARNING, logger="care_pricing.client"):
            lists = fetch_price_lists(client)

        assert lists["ambulance"].value == []
        assert lists["ambulance"].is_fallback
        assert lists["nursing"].value
        assert "ambulance" in caplog.text

    async def test_async_lists(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api)
        mock_api.get(NURSING).mock(return_value=Response(500))

        lists = await fetch_price_lists_async(client)

        assert lists["nursing"].value == []
        assert len(lists["ambulance"].value) == 1


@pytest.mark.unit
class TestLoadPricingContext:
    def test_context_from_backend(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api)
        settings = Settings(tiers=TierSettings(tier1_cities=["pune"], tier2_cities=["nashik"]))

        context = load_pricing_context(client, settings)

        assert context.surcharges.night_duty_percentage == 25
        assert context.surcharges.night_start_hour == 18
        assert context.tier_table.tier1 == ("pune",)
        assert len(context.nursing_prices) == 1
        assert len(context.ambulance_prices) == 1

    async def test_context_from_backend_async(self, client: PricingClient, mock_api) -> None:
        mock_all(mock_api, night=Response(500))

        context = await load_pricing_context_async(client, Settings())

        assert context.surcharges.night_duty_percentage == 20
        assert context.surcharges.emergency_percentage == 30
        assert len(context.physiotherapy_prices) == 1
