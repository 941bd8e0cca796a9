"""Typed request and response models for the atoship API."""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class AtoshipModel(BaseModel):
    """Base model: unknown fields returned by the API are kept, not rejected."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class Page(AtoshipModel, Generic[T]):
    """One page of a paginated listing. Callers request further pages themselves."""

    items: List[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    has_more: bool = False

    @model_validator(mode="before")
    @classmethod
    def _fill_pagination(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "items" not in data and isinstance(data.get("data"), list):
            data["items"] = data.pop("data")
        if "has_more" not in data:
            page = int(data.get("page") or 1)
            limit = int(data.get("limit") or 20)
            total = int(data.get("total") or 0)
            data["has_more"] = page * limit < total
        return data

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_more else None


# Addresses

class Address(AtoshipModel):
    name: Optional[str] = None
    company: Optional[str] = None
    street1: str = ""
    street2: Optional[str] = None
    city: str = ""
    state: Optional[str] = None
    postal_code: str = ""
    country: str = "US"
    phone: Optional[str] = None
    email: Optional[str] = None
    is_residential: Optional[bool] = None


class SavedAddress(Address):
    id: str
    created_at: Optional[datetime] = None


class AddressValidation(AtoshipModel):
    is_valid: bool = False
    normalized_address: Optional[Address] = None
    errors: List[str] = Field(default_factory=list)
    suggestions: List[Address] = Field(default_factory=list)


# Orders

class OrderItem(AtoshipModel):
    name: str
    sku: Optional[str] = None
    quantity: int = 1
    unit_price: Optional[float] = None
    weight: Optional[float] = None
    weight_unit: str = "lb"


class CreateOrderRequest(AtoshipModel):
    order_number: Optional[str] = None
    recipient_name: str = ""
    recipient_company: Optional[str] = None
    recipient_street1: str = ""
    recipient_street2: Optional[str] = None
    recipient_city: str = ""
    recipient_state: Optional[str] = None
    recipient_postal_code: str = ""
    recipient_country: str = "US"
    recipient_phone: Optional[str] = None
    recipient_email: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UpdateOrderRequest(AtoshipModel):
    recipient_name: Optional[str] = None
    recipient_company: Optional[str] = None
    recipient_street1: Optional[str] = None
    recipient_street2: Optional[str] = None
    recipient_city: Optional[str] = None
    recipient_state: Optional[str] = None
    recipient_postal_code: Optional[str] = None
    recipient_country: Optional[str] = None
    recipient_phone: Optional[str] = None
    recipient_email: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class Order(AtoshipModel):
    id: str
    order_number: Optional[str] = None
    status: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_street1: Optional[str] = None
    recipient_city: Optional[str] = None
    recipient_state: Optional[str] = None
    recipient_postal_code: Optional[str] = None
    recipient_country: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    tracking_number: Optional[str] = None
    total_amount: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Shipping

class Parcel(AtoshipModel):
    length: float
    width: float
    height: float
    dim_unit: str = "in"
    weight: float
    weight_unit: str = "lb"


class RateRequest(AtoshipModel):
    from_address: Address
    to_address: Address
    parcel: Parcel
    carriers: Optional[List[str]] = None


class Rate(AtoshipModel):
    id: Optional[str] = None
    carrier: str
    service: str
    rate: float
    retail_rate: Optional[float] = None
    currency: str = "USD"
    delivery_days: Optional[int] = None
    estimated_delivery: Optional[datetime] = None

    @property
    def is_discounted(self) -> bool:
        return self.retail_rate is not None and self.retail_rate > self.rate

    @property
    def discount_percentage(self) -> float:
        if not self.is_discounted:
            return 0.0
        return (self.retail_rate - self.rate) / self.retail_rate * 100


class RateComparison(AtoshipModel):
    """Rates for one shipment with the cheapest, fastest and best-value picks."""

    rates: List[Rate] = Field(default_factory=list)

    @property
    def has_rates(self) -> bool:
        return bool(self.rates)

    @property
    def cheapest(self) -> Optional[Rate]:
        return min(self.rates, key=lambda r: r.rate, default=None)

    @property
    def fastest(self) -> Optional[Rate]:
        timed = [r for r in self.rates if r.delivery_days is not None]
        return min(timed, key=lambda r: (r.delivery_days, r.rate), default=None)

    @property
    def best_value(self) -> Optional[Rate]:
        # Price and transit time, each relative to the best available, weigh equally
        cheapest, fastest = self.cheapest, self.fastest
        if cheapest is None or fastest is None or cheapest.rate <= 0:
            return cheapest
        # Same-day rates count as one day
        fastest_days = max(fastest.delivery_days, 1)
        timed = [r for r in self.rates if r.delivery_days is not None]
        return min(
            timed,
            key=lambda r: r.rate / cheapest.rate + r.delivery_days / fastest_days,
        )


class PurchaseLabelRequest(AtoshipModel):
    rate_id: str
    order_id: Optional[str] = None
    label_format: str = "PDF"


class Label(AtoshipModel):
    id: str
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    service: Optional[str] = None
    rate: Optional[float] = None
    label_url: Optional[str] = None
    order_id: Optional[str] = None
    created_at: Optional[datetime] = None


# Tracking

class TrackingEvent(AtoshipModel):
    timestamp: Optional[datetime] = None
    status: Optional[str] = None
    description: str = ""
    location: Optional[str] = None


class TrackingInfo(AtoshipModel):
    tracking_number: str
    carrier: Optional[str] = None
    status: str = "unknown"
    current_location: Optional[str] = None
    shipped_at: Optional[datetime] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    signature: Optional[str] = None
    events: List[TrackingEvent] = Field(default_factory=list)

    @property
    def is_delivered(self) -> bool:
        return self.status.lower() == "delivered"

    @property
    def is_in_transit(self) -> bool:
        return self.status.lower() in ("in_transit", "out_for_delivery")

    @property
    def days_in_transit(self) -> Optional[int]:
        start = self.shipped_at
        if start is None:
            stamps = [e.timestamp for e in self.events if e.timestamp is not None]
            start = min(stamps, key=_as_utc) if stamps else None
        if start is None:
            return None
        end = self.actual_delivery or datetime.now(timezone.utc)
        return max(0, (_as_utc(end) - _as_utc(start)).days)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Users

class UserProfile(AtoshipModel):
    id: str
    email: str
    name: Optional[str] = None
    company: Optional[str] = None
    account_type: Optional[str] = None
    created_at: Optional[datetime] = None


class UpdateProfileRequest(AtoshipModel):
    name: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None


class UsageStats(AtoshipModel):
    orders_created: int = 0
    labels_purchased: int = 0
    total_shipping_cost: float = 0.0
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None


# Carriers

class Carrier(AtoshipModel):
    id: str
    name: str
    code: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    active: bool = True


class CreateCarrierAccountRequest(AtoshipModel):
    carrier: str
    account_number: str
    nickname: Optional[str] = None
    credentials: Dict[str, str] = Field(default_factory=dict)


class CarrierAccount(AtoshipModel):
    id: str
    carrier: str
    account_number: Optional[str] = None
    nickname: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None


# Webhooks

class CreateWebhookRequest(AtoshipModel):
    url: str
    events: List[str] = Field(default_factory=list)
    active: bool = True


class UpdateWebhookRequest(AtoshipModel):
    url: Optional[str] = None
    events: Optional[List[str]] = None
    active: Optional[bool] = None


class Webhook(AtoshipModel):
    id: str
    url: str
    events: List[str] = Field(default_factory=list)
    active: bool = True
    secret: Optional[str] = None
    created_at: Optional[datetime] = None


class WebhookTestResult(AtoshipModel):
    delivered: bool = False
    status_code: Optional[int] = None
    response_time_ms: Optional[float] = None


class WebhookEvent(AtoshipModel):
    id: str
    type: str
    created_at: Optional[datetime] = None
    data: Dict[str, Any] = Field(default_factory=dict)


# Admin

class SystemStats(AtoshipModel):
    total_users: int = 0
    active_users: int = 0
    total_orders: int = 0
    total_labels: int = 0
    total_revenue: float = 0.0


class AdminUser(AtoshipModel):
    id: str
    email: str
    name: Optional[str] = None
    status: Optional[str] = None
    account_type: Optional[str] = None
    created_at: Optional[datetime] = None
