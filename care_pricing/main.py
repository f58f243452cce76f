"""Command-line entry point for quoting a booking."""

import argparse
import logging
import sys
import uuid
from pathlib import Path

from pydantic import ValidationError

from .catalog import classify_service
from .client import PricingClient, load_pricing_context
from .estimator import estimate
from .models import BillingFrequency, BookingInputs, GeoPoint, PricingContext
from .pricing_logging import log_booking_context, setup_logging
from .settings import Settings, get_settings
from .tiers import TierTable

logger = logging.getLogger(__name__)


def parse_point(value: str) -> GeoPoint:
    """Parse a ``LAT,LON`` argument."""
    try:
        lat, lon = (float(part) for part in value.split(","))
        return GeoPoint(latitude=lat, longitude=lon)
    except (ValueError, ValidationError) as e:
        raise argparse.ArgumentTypeError(f"expected LAT,LON in degrees, got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="care-pricing",
        description="Estimate the price of a home-care or ambulance booking",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Print the estimate for one booking as JSON")
    quote.add_argument("--service-title", required=True, help='e.g. "Home Nursing"')
    quote.add_argument("--service-name", required=True, help="Service type name in the price list")
    quote.add_argument("--service-description")
    quote.add_argument("--city")
    quote.add_argument("--address")
    quote.add_argument("--pickup-address")
    quote.add_argument("--preferred-time", help="HH:MM, 24-hour")
    quote.add_argument("--urgency", choices=["normal", "urgent", "emergency"], default="normal")
    quote.add_argument(
        "--billing-frequency",
        choices=[f.value for f in BillingFrequency],
        default=BillingFrequency.PER_VISIT.value,
    )
    quote.add_argument("--monthly-visits", type=int, default=1)
    quote.add_argument("--location", type=parse_point, metavar="LAT,LON")
    quote.add_argument("--pickup", type=parse_point, metavar="LAT,LON")
    quote.add_argument("--dropoff", type=parse_point, metavar="LAT,LON")
    quote.add_argument("--sunday-holiday", action="store_true")
    quote.add_argument("--extended-session", action="store_true")
    quote.add_argument(
        "--prices-file",
        type=Path,
        help="JSON pricing context to use instead of fetching from the backend",
    )
    quote.add_argument("--session-id", help="Booking session id for log correlation")
    return parser


def load_context(args: argparse.Namespace, settings: Settings) -> PricingContext:
    if args.prices_file is not None:
        context = PricingContext.model_validate_json(args.prices_file.read_text())
        if "tier_table" not in context.model_fields_set:
            context = context.model_copy(
                update={"tier_table": TierTable.from_settings(settings.tiers)}
            )
        return context

    with PricingClient.from_settings(settings.api) as client:
        return load_pricing_context(client, settings)


def run_quote(args: argparse.Namespace, settings: Settings) -> int:
    inputs = BookingInputs(
        service_title=args.service_title,
        service_name=args.service_name,
        service_description=args.service_description,
        city=args.city,
        address=args.address,
        pickup_address=args.pickup_address,
        preferred_time=args.preferred_time,
        urgency=args.urgency,
        billing_frequency=BillingFrequency(args.billing_frequency),
        monthly_visits_count=args.monthly_visits,
        location=args.location,
        pickup=args.pickup,
        dropoff=args.dropoff,
        is_sunday_holiday=args.sunday_holiday,
        is_extended_session=args.extended_session,
    )

    session_id = args.session_id or uuid.uuid4().hex
    service_kind = classify_service(inputs.service_title)
    with log_booking_context(
        session_id, service_kind=service_kind.value, price_rule=inputs.service_name
    ):
        context = load_context(args, settings)
        result = estimate(inputs, context)
        logger.debug("Quote computed: %s", type(result).__name__)

    print(result.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the care-pricing command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        json_output=settings.log_format == "json",
        environment=settings.environment,
    )

    try:
        return run_quote(args, settings)
    except (OSError, ValidationError) as e:
        logger.error("Could not quote booking: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
