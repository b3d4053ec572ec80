"""
Pydantic Schemas for the Domain and the HTTP Surface

Domain records (catalog, cart, orders, drivers) and the request/response
bodies of the API share this module, the way the ordering backend keeps
its schemas in one place.
"""

import random
import string
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


def utcnow() -> datetime:
    """Timezone-aware current time used for every timestamp."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


# =============================================================================
# ENUMS
# =============================================================================

class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_DELIVERY = "free_delivery"


class OrderStatus(str, Enum):
    """Order lifecycle, listed in happy-path order."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    DRIVER_ASSIGNED = "driver_assigned"
    PICKED_UP = "picked_up"
    ON_THE_WAY = "on_the_way"
    ARRIVING = "arriving"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @property
    def is_active(self) -> bool:
        return self not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED)

    @property
    def title(self) -> str:
        return _STATUS_TEXT[self][0]

    @property
    def subtitle(self) -> str:
        return _STATUS_TEXT[self][1]


_STATUS_TEXT = {
    OrderStatus.PENDING: ("Order Pending", "Waiting for restaurant confirmation"),
    OrderStatus.CONFIRMED: ("Order Confirmed", "Restaurant is preparing your order"),
    OrderStatus.PREPARING: ("Preparing Your Order", "Your food is being made"),
    OrderStatus.READY_FOR_PICKUP: ("Ready for Pickup", "Waiting for driver"),
    OrderStatus.DRIVER_ASSIGNED: ("Driver On the Way", "Driver is heading to restaurant"),
    OrderStatus.PICKED_UP: ("Order Picked Up", "Driver has your order"),
    OrderStatus.ON_THE_WAY: ("On the Way", "Your order is on its way"),
    OrderStatus.ARRIVING: ("Almost There!", "Driver is nearby"),
    OrderStatus.DELIVERED: ("Order Delivered", "Enjoy your meal!"),
    OrderStatus.CANCELLED: ("Order Cancelled", "This order was cancelled"),
    OrderStatus.REFUNDED: ("Order Refunded", "Refund has been processed"),
}


# =============================================================================
# GEO
# =============================================================================

class Coordinate(BaseModel):
    """A WGS84 point in degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    def offset(self, d_lat: float, d_lon: float) -> "Coordinate":
        return Coordinate(latitude=self.latitude + d_lat, longitude=self.longitude + d_lon)


class DeliveryAddress(BaseModel):
    """Where an order is dropped off."""
    label: str = Field(default="Home", max_length=50)
    street: str = Field(..., min_length=1, max_length=255, examples=["123 Main St"])
    apartment: Optional[str] = Field(None, max_length=50)
    city: str = Field(..., min_length=1, max_length=50, examples=["San Francisco"])
    state: str = Field(..., min_length=1, max_length=50, examples=["CA"])
    zip_code: str = Field(..., min_length=1, max_length=10, examples=["94102"])
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    instructions: Optional[str] = Field(None, max_length=500)

    @property
    def full_address(self) -> str:
        parts = [self.street]
        if self.apartment:
            parts.append(f"Apt {self.apartment}")
        parts.append(f"{self.city}, {self.state} {self.zip_code}")
        return ", ".join(parts)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


# =============================================================================
# CATALOG
# =============================================================================

class CustomizationOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float = 0.0


class CustomizationGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_required: bool = False
    max_selections: int = 1
    options: List[CustomizationOption] = Field(default_factory=list)


class Restaurant(BaseModel):
    """Read-only catalog record for a restaurant."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    image_url: str = ""
    cuisine_types: List[str] = Field(default_factory=list)
    address: str = ""
    latitude: float
    longitude: float
    rating: float = 0.0
    review_count: int = 0
    delivery_time: str = ""
    delivery_fee: float = 0.0
    minimum_order: float = 0.0
    distance: float = 0.0
    is_open: bool = True
    is_featured: bool = False

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class MenuItem(BaseModel):
    """Read-only catalog record for a dish."""
    model_config = ConfigDict(frozen=True)

    id: str
    restaurant_id: str
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    image_url: str = ""
    category: str = ""
    is_popular: bool = False
    is_available: bool = True
    customization_groups: List[CustomizationGroup] = Field(default_factory=list)


class PromoCode(BaseModel):
    """A discount rule subject to validity and minimum-order checks."""
    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    description: str = ""
    discount_type: DiscountType
    discount_value: float = Field(default=0.0, ge=0)
    minimum_order: float = Field(default=0.0, ge=0)
    max_discount: Optional[float] = Field(default=None, ge=0)
    valid_until: datetime
    usage_limit: int = 1
    used_count: int = 0

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return now < self.valid_until and self.used_count < self.usage_limit

    def is_applicable(self, subtotal: float, now: Optional[datetime] = None) -> bool:
        return self.is_valid(now) and subtotal >= self.minimum_order


# =============================================================================
# CART
# =============================================================================

class SelectedCustomization(BaseModel):
    """One chosen option of a customization group."""
    model_config = ConfigDict(frozen=True)

    id: str
    group_name: str
    option_name: str
    price: float = 0.0


class CartLine(BaseModel):
    """A menu item in the cart with its quantity and chosen options."""
    id: str = Field(default_factory=lambda: new_id("line"))
    menu_item_id: str
    name: str
    image_url: str = ""
    restaurant_id: str
    restaurant_name: str
    unit_price: float = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    special_instructions: Optional[str] = None
    customizations: List[SelectedCustomization] = Field(default_factory=list)
    added_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def total_price(self) -> float:
        extras = sum(c.price for c in self.customizations)
        return (self.unit_price + extras) * self.quantity


class CartSummary(BaseModel):
    """Derived pricing for a cart. Recomputed on every read, never stored."""
    model_config = ConfigDict(frozen=True)

    lines: List[CartLine] = Field(default_factory=list)
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    service_fee: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    promo_code: Optional[str] = None

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def rounded(self) -> "CartSummary":
        """Copy with every money field rounded to cents for display."""
        return self.model_copy(update={
            "subtotal": round(self.subtotal, 2),
            "delivery_fee": round(self.delivery_fee, 2),
            "service_fee": round(self.service_fee, 2),
            "tax": round(self.tax, 2),
            "discount": round(self.discount, 2),
            "total": round(self.total, 2),
        })


# =============================================================================
# DRIVERS
# =============================================================================

class DriverInfo(BaseModel):
    """Driver details copied onto an order when one is assigned."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    image_url: Optional[str] = None
    vehicle_info: str = ""


# =============================================================================
# ORDERS
# =============================================================================

def generate_order_number() -> str:
    """Two uppercase letters followed by six digits, e.g. ``XY789012``."""
    letters = "".join(random.choices(string.ascii_uppercase, k=2))
    return f"{letters}{random.randint(100000, 999999):06d}"


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("oi"))
    menu_item_id: str
    name: str
    image_url: str = ""
    quantity: int = Field(..., ge=1)
    unit_price: float
    customizations: List[SelectedCustomization] = Field(default_factory=list)
    special_instructions: Optional[str] = None

    @computed_field
    @property
    def total_price(self) -> float:
        extras = sum(c.price for c in self.customizations)
        return (self.unit_price + extras) * self.quantity


class Order(BaseModel):
    """
    A placed order.

    Status and driver fields are written by the order service only; the
    tracking scheduler supplies driver position through it.
    """
    id: str = Field(default_factory=lambda: new_id("order"))
    order_number: str = Field(default_factory=generate_order_number)
    user_id: str
    restaurant_id: str
    restaurant_name: str
    items: List[OrderItem]
    status: OrderStatus = OrderStatus.PENDING

    subtotal: float
    delivery_fee: float
    service_fee: float
    tax: float
    discount: float = 0.0
    total: float
    tip_amount: float = 0.0
    promo_code: Optional[str] = None

    delivery_address: str
    delivery_latitude: float
    delivery_longitude: float
    delivery_instructions: Optional[str] = None

    payment_method_id: str = ""
    payment_reference: Optional[str] = None

    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    driver_image_url: Optional[str] = None
    driver_vehicle_info: Optional[str] = None
    driver_latitude: Optional[float] = None
    driver_longitude: Optional[float] = None
    driver_progress: float = 0.0

    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    rating: Optional[int] = None
    review: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def delivery_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.delivery_latitude, longitude=self.delivery_longitude)

    @property
    def driver_coordinate(self) -> Optional[Coordinate]:
        if self.driver_latitude is None or self.driver_longitude is None:
            return None
        return Coordinate(latitude=self.driver_latitude, longitude=self.driver_longitude)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class AddToCartRequest(BaseModel):
    """Add a menu item from the catalog to the cart."""
    menu_item_id: str = Field(..., examples=["item_1_1"])
    quantity: int = Field(default=1, ge=1, le=99)
    special_instructions: Optional[str] = Field(None, max_length=200)
    option_ids: List[str] = Field(default_factory=list, examples=[["opt_size_large"]])


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(..., le=99, examples=[2])


class ApplyPromoRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50, examples=["WELCOME50"])


class CheckoutRequest(BaseModel):
    """Place an order from the current cart."""
    delivery_address: DeliveryAddress
    payment_method_id: str = Field(default="pm_default", examples=["pm_1"])
    tip_amount: float = Field(default=0.0, ge=0)
    delivery_instructions: Optional[str] = Field(None, max_length=500)
    start_tracking: bool = True


class RateOrderRequest(BaseModel):
    rating: int = Field(..., examples=[5])
    review: Optional[str] = Field(None, max_length=1000)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class StatusStep(BaseModel):
    status: OrderStatus
    title: str
    is_completed: bool
    is_current: bool


class TrackingResponse(BaseModel):
    """Snapshot of a tracked order for the live map."""
    order_id: str
    status: OrderStatus
    status_title: str
    status_subtitle: str
    is_tracking: bool
    driver_progress: float
    driver_position: Optional[Coordinate] = None
    restaurant_position: Optional[Coordinate] = None
    delivery_position: Coordinate
    traveled_path: List[Coordinate] = Field(default_factory=list)
    steps: List[StatusStep] = Field(default_factory=list)
    estimated_delivery_time: Optional[datetime] = None


class OrderListResponse(BaseModel):
    active: List[Order]
    past: List[Order]


class FavoritesResponse(BaseModel):
    restaurant_ids: List[str]
    menu_item_ids: List[str]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    code: Optional[str] = None
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    catalog_service: str
    driver_service: str
    payment_service: str
    notification_service: str
    tracked_orders: int
    timestamp: datetime
