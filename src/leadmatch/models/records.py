"""Canonical investor, coverage and lead models shared across loaders and the engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Mapping, Optional, Sequence

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict


InvestorStatus = Literal["active", "paused", "test", "inactive"]
MarketType = Literal["primary", "direct_purchase", "full_coverage", "secondary"]

MATCHABLE_STATUSES = frozenset({"active", "test"})
ZIP_SCOPED_MARKET_TYPES = frozenset({"primary", "direct_purchase", "secondary"})

CRITERIA_ORDER: tuple[str, ...] = (
    "location",
    "price",
    "year_built",
    "property_type",
    "condition",
)

YEAR_BUILT_FLOOR = 0
YEAR_BUILT_CEILING = 9999


class InvalidLead(ValueError):
    """Raised when a lead lacks a usable state or zip code."""


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Lead(BaseModel):
    """Incoming property lead to route to investors."""

    state: str = Field(..., pattern=r"^[A-Z]{2}$")
    zip_code: str = Field(
        ...,
        pattern=r"^\d{5}$",
        validation_alias=AliasChoices("zip_code", "zipCode", "zip"),
    )
    ask_price: Optional[float] = Field(
        default=None,
        ge=0.0,
        validation_alias=AliasChoices("ask_price", "askPrice"),
    )
    year_built: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("year_built", "yearBuilt"),
    )
    property_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("property_type", "propertyType"),
    )
    condition: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("state", mode="before")
    @classmethod
    def _clean_state(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("zip_code", mode="before")
    @classmethod
    def _clean_zip(cls, value: Any) -> Any:
        if isinstance(value, int):
            return f"{value:05d}"
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("ask_price", "year_built", "property_type", "condition", mode="before")
    @classmethod
    def _clean_optional(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return value.strip()
        return value

    def populated_criteria(self) -> tuple[str, ...]:
        """Criteria evaluated for this lead, in fixed order; location is always first."""

        populated = {
            "location": True,
            "price": self.ask_price is not None,
            "year_built": self.year_built is not None,
            "property_type": bool(self.property_type),
            "condition": bool(self.condition),
        }
        return tuple(name for name in CRITERIA_ORDER if populated[name])


def parse_lead(data: Mapping[str, Any]) -> Lead:
    """Validate a raw lead payload, raising InvalidLead on any problem."""

    if isinstance(data, Lead):
        return data
    try:
        return Lead.model_validate(dict(data))
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "lead"
            problems.append(f"{location}: {error.get('msg', 'invalid value')}")
        raise InvalidLead("; ".join(problems)) from None


class Investor(BaseModel):
    """Investor identity plus the routing attributes the engine reads."""

    id: str = Field(..., min_length=1)
    company_name: str
    main_poc: str = ""
    tier: int = Field(..., ge=1, le=10)
    status: InvestorStatus = "active"
    weekly_cap: int = Field(default=0, ge=0)
    tags: List[str] = Field(default_factory=list)
    hubspot_url: Optional[str] = None
    hubspot_company_id: Optional[str] = None
    coverage_type: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_matchable(self) -> bool:
        return self.status in MATCHABLE_STATUSES


class BuyBox(BaseModel):
    """An investor's acceptance criteria; unset bounds are open."""

    id: str = Field(..., min_length=1)
    investor_id: str
    property_types: List[str] = Field(default_factory=list)
    condition_types: List[str] = Field(default_factory=list)
    lead_types: List[str] = Field(default_factory=list)
    price_min: Optional[float] = Field(default=None, ge=0.0)
    price_max: Optional[float] = Field(default=None, ge=0.0)
    year_built_min: Optional[int] = None
    year_built_max: Optional[int] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("property_types", "condition_types", "lead_types", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def price_bounds(self) -> tuple[float, float]:
        low = self.price_min if self.price_min is not None else 0.0
        high = self.price_max if self.price_max is not None else float("inf")
        return low, high

    def year_bounds(self) -> tuple[int, int]:
        low = self.year_built_min if self.year_built_min is not None else YEAR_BUILT_FLOOR
        high = self.year_built_max if self.year_built_max is not None else YEAR_BUILT_CEILING
        return low, high


class Market(BaseModel):
    """One coverage row; full_coverage rows are state-scoped, the rest zip-scoped."""

    id: str = ""
    investor_id: str
    market_type: MarketType
    states: List[str] = Field(default_factory=list)
    zip_codes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("states", "zip_codes", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_full_coverage(self) -> bool:
        return self.market_type == "full_coverage"

    @property
    def is_zip_scoped(self) -> bool:
        return self.market_type in ZIP_SCOPED_MARKET_TYPES


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _buy_box_recency(buy_box: BuyBox) -> tuple[bool, datetime, str]:
    stamp = buy_box.updated_at
    if stamp is None:
        return False, _EPOCH, buy_box.id
    if stamp.tzinfo is None:
        # naive timestamps are stored as UTC
        stamp = stamp.replace(tzinfo=timezone.utc)
    return True, stamp, buy_box.id


def select_buy_box(buy_boxes: Sequence[BuyBox]) -> Optional[BuyBox]:
    """Pick the most recently updated buy box; ties fall back to the highest id."""

    if not buy_boxes:
        return None
    return max(buy_boxes, key=_buy_box_recency)


class InvestorProfile(BaseModel):
    """Investor bundled with its resolved buy box and coverage markets."""

    investor: Investor
    buy_box: Optional[BuyBox] = None
    markets: List[Market] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_records(
        cls,
        investor: Investor,
        *,
        buy_boxes: Sequence[BuyBox] = (),
        markets: Sequence[Market] = (),
    ) -> "InvestorProfile":
        return cls(
            investor=investor,
            buy_box=select_buy_box(buy_boxes),
            markets=list(markets),
        )
