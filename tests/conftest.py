"""Shared fixtures: zero-latency mock collaborators wired like the app."""

import random
from datetime import timedelta

import pytest

from munchly.core.config import Settings
from munchly.schemas import (
    CartLine,
    DeliveryAddress,
    DiscountType,
    Order,
    OrderItem,
    OrderStatus,
    PromoCode,
    utcnow,
)
from munchly.services.cart import CartStore
from munchly.services.catalog import MockCatalogService
from munchly.services.catalog.fixtures import MENU_ITEMS, RESTAURANTS
from munchly.services.drivers import MockDriverService
from munchly.services.notifications import MockNotificationService
from munchly.services.orders import OrderService
from munchly.services.payment import MockPaymentService
from munchly.services.preferences import PreferencesStore
from munchly.services.tracking import TrackingScheduler


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        mock_min_latency=0,
        mock_max_latency=0,
        data_directory=str(tmp_path / "data"),
    )


@pytest.fixture
def catalog() -> MockCatalogService:
    return MockCatalogService(min_latency=0, max_latency=0)


@pytest.fixture
def drivers() -> MockDriverService:
    return MockDriverService(min_latency=0, max_latency=0)


@pytest.fixture
def payment() -> MockPaymentService:
    return MockPaymentService(min_latency=0, max_latency=0)


@pytest.fixture
def notifications() -> MockNotificationService:
    return MockNotificationService(min_latency=0, max_latency=0)


@pytest.fixture
def cart(catalog) -> CartStore:
    return CartStore(catalog)


@pytest.fixture
def orders(catalog, drivers, payment, notifications, settings) -> OrderService:
    return OrderService(catalog, drivers, payment, notifications, settings)


@pytest.fixture
def tracking(orders, catalog, settings) -> TrackingScheduler:
    return TrackingScheduler(orders, catalog, settings, rng=random.Random(7))


@pytest.fixture
def preferences(tmp_path) -> PreferencesStore:
    return PreferencesStore(tmp_path / "prefs" / "preferences.json", lock_timeout=1, recent_limit=10)


# =============================================================================
# CATALOG RECORDS
# =============================================================================

def _restaurant(restaurant_id):
    return next(r for r in RESTAURANTS if r.id == restaurant_id)


def _menu_item(menu_item_id):
    return next(m for m in MENU_ITEMS if m.id == menu_item_id)


@pytest.fixture
def tonys():
    return _restaurant("rest_1")


@pytest.fixture
def burger_joint():
    return _restaurant("rest_2")


@pytest.fixture
def margherita():
    return _menu_item("item_1_1")


@pytest.fixture
def garlic_knots():
    return _menu_item("item_1_4")


@pytest.fixture
def smash_burger():
    return _menu_item("item_2_1")


@pytest.fixture
def address() -> DeliveryAddress:
    return DeliveryAddress(
        street="123 Main St",
        apartment="4B",
        city="San Francisco",
        state="CA",
        zip_code="94102",
        latitude=37.7849,
        longitude=-122.4094,
    )


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_line():
    def factory(unit_price=12.99, quantity=1, restaurant_id="rest_1", customizations=()):
        return CartLine(
            menu_item_id=f"item_{unit_price}",
            name="Test Item",
            restaurant_id=restaurant_id,
            restaurant_name="Test Restaurant",
            unit_price=unit_price,
            quantity=quantity,
            customizations=list(customizations),
        )

    return factory


@pytest.fixture
def make_promo():
    def factory(
        code="TEST",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=10,
        minimum_order=0.0,
        max_discount=None,
        valid_for=timedelta(days=1),
        usage_limit=10,
        used_count=0,
    ):
        return PromoCode(
            id=f"promo_{code.lower()}",
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            minimum_order=minimum_order,
            max_discount=max_discount,
            valid_until=utcnow() + valid_for,
            usage_limit=usage_limit,
            used_count=used_count,
        )

    return factory


@pytest.fixture
def make_order():
    def factory(status=OrderStatus.CONFIRMED, **overrides):
        fields = dict(
            user_id="guest",
            restaurant_id="rest_1",
            restaurant_name="Tony's Pizzeria",
            items=[OrderItem(menu_item_id="item_1_1", name="Margherita Pizza", quantity=1, unit_price=16.99)],
            status=status,
            subtotal=16.99,
            delivery_fee=2.99,
            service_fee=0.85,
            tax=1.49,
            total=22.32,
            delivery_address="123 Main St, San Francisco, CA 94102",
            delivery_latitude=37.7849,
            delivery_longitude=-122.4094,
        )
        fields.update(overrides)
        return Order(**fields)

    return factory


@pytest.fixture
async def placed_order(orders, cart, tonys, margherita, address) -> Order:
    cart.add_item(margherita, tonys, quantity=2)
    return await orders.place_order(cart, address, "pm_card_visa", tip_amount=3.0)
