"""City tier classification for price uplift.

Bookings in the larger Andhra Pradesh cities carry a percentage uplift over
the base (tier-3) price. The city or address text typed into the booking form
is matched by substring against two keyword lists; tier-1 is checked first so
a text containing any tier-1 keyword is tier-1 regardless of what else it
contains.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CityTier(str, Enum):
    """Pricing tiers, from major cities down to the base rate."""

    TIER_1 = "tier-1"
    TIER_2 = "tier-2"
    TIER_3 = "tier-3"

    @property
    def percentage(self) -> int:
        """Uplift over the base price, in percent."""
        return TIER_PERCENTAGES[self]

    @property
    def description(self) -> str:
        return TIER_DESCRIPTIONS[self]


TIER_PERCENTAGES: dict[CityTier, int] = {
    CityTier.TIER_1: 20,
    CityTier.TIER_2: 10,
    CityTier.TIER_3: 0,
}

TIER_DESCRIPTIONS: dict[CityTier, str] = {
    CityTier.TIER_1: "Tier-1 City (Major AP Cities)",
    CityTier.TIER_2: "Tier-2 City",
    CityTier.TIER_3: "Tier-3 Town (Base Rate)",
}


class TierTable(BaseModel):
    """Keyword lists used to classify a city or address."""

    tier1: tuple[str, ...] = Field(
        default=("vizag", "visakhapatnam", "vijayawada", "guntur"),
    )
    tier2: tuple[str, ...] = Field(
        default=("kakinada", "rajahmundry", "tirupati", "nellore"),
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("tier1", "tier2")
    @classmethod
    def normalize_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Keywords are matched against lowercased text; an empty one would match everything."""
        keywords = tuple(keyword.strip().lower() for keyword in v)
        if any(not keyword for keyword in keywords):
            raise ValueError("Tier keywords must be non-empty")
        return keywords

    @classmethod
    def from_settings(cls, settings) -> "TierTable":
        """Build a table from TierSettings."""
        return cls(tier1=tuple(settings.tier1_cities), tier2=tuple(settings.tier2_cities))


DEFAULT_TIER_TABLE = TierTable()


def classify_city(text: str | None, table: TierTable = DEFAULT_TIER_TABLE) -> CityTier:
    """Return the tier for a free-text city or address.

    Empty or missing text is tier-3, never an error.
    """
    if not text:
        return CityTier.TIER_3

    lowered = text.lower()
    if any(keyword in lowered for keyword in table.tier1):
        return CityTier.TIER_1
    if any(keyword in lowered for keyword in table.tier2):
        return CityTier.TIER_2
    return CityTier.TIER_3


def tier_percentage(text: str | None, table: TierTable = DEFAULT_TIER_TABLE) -> int:
    """Return the uplift percentage (0, 10 or 20) for a city or address."""
    return classify_city(text, table).percentage
