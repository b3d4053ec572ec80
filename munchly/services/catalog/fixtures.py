"""
Mock Catalog Data

Restaurants, menus and promo codes served by MockCatalogService, plus the
order history loaded into the order book in development mode.
"""

from datetime import timedelta
from typing import List

from munchly.schemas import (
    CustomizationGroup,
    CustomizationOption,
    DiscountType,
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PromoCode,
    Restaurant,
    utcnow,
)


# =============================================================================
# RESTAURANTS
# =============================================================================

RESTAURANTS: List[Restaurant] = [
    Restaurant(
        id="rest_1",
        name="Tony's Pizzeria",
        description="Authentic New York style pizza made with fresh ingredients and traditional recipes.",
        cuisine_types=["Pizza", "Italian"],
        address="123 Main Street, Downtown",
        latitude=37.7749,
        longitude=-122.4194,
        rating=4.8,
        review_count=1250,
        delivery_time="20-35 min",
        delivery_fee=2.99,
        minimum_order=15.0,
        distance=1.2,
        is_featured=True,
    ),
    Restaurant(
        id="rest_2",
        name="Burger Joint",
        description="Gourmet burgers crafted with premium beef and fresh toppings.",
        cuisine_types=["Burgers", "American", "Fast Food"],
        address="456 Oak Avenue, Midtown",
        latitude=37.7849,
        longitude=-122.4094,
        rating=4.6,
        review_count=890,
        delivery_time="15-25 min",
        delivery_fee=1.99,
        minimum_order=12.0,
        distance=0.8,
        is_featured=True,
    ),
    Restaurant(
        id="rest_3",
        name="Sakura Sushi",
        description="Premium Japanese cuisine featuring fresh sashimi and creative rolls.",
        cuisine_types=["Sushi", "Japanese"],
        address="789 Cherry Blossom Lane",
        latitude=37.7649,
        longitude=-122.4294,
        rating=4.9,
        review_count=2100,
        delivery_time="25-40 min",
        delivery_fee=3.99,
        minimum_order=25.0,
        distance=2.1,
        is_featured=True,
    ),
    Restaurant(
        id="rest_5",
        name="Taco Fiesta",
        description="Street-style Mexican tacos, burritos, and quesadillas.",
        cuisine_types=["Mexican", "Tacos"],
        address="567 Fiesta Road",
        latitude=37.7949,
        longitude=-122.3994,
        rating=4.7,
        review_count=1456,
        delivery_time="15-30 min",
        delivery_fee=1.49,
        minimum_order=10.0,
        distance=0.5,
        is_featured=True,
    ),
]


# =============================================================================
# CUSTOMIZATIONS
# =============================================================================

PIZZA_CUSTOMIZATIONS = [
    CustomizationGroup(
        id="pizza_size",
        name="Size",
        is_required=True,
        max_selections=1,
        options=[
            CustomizationOption(id="pizza_size_small", name='Small (10")', price=0),
            CustomizationOption(id="pizza_size_medium", name='Medium (12")', price=3.00),
            CustomizationOption(id="pizza_size_large", name='Large (14")', price=6.00),
            CustomizationOption(id="pizza_size_xlarge", name='X-Large (16")', price=9.00),
        ],
    ),
    CustomizationGroup(
        id="pizza_crust",
        name="Crust",
        is_required=True,
        max_selections=1,
        options=[
            CustomizationOption(id="pizza_crust_regular", name="Regular", price=0),
            CustomizationOption(id="pizza_crust_thin", name="Thin Crust", price=0),
            CustomizationOption(id="pizza_crust_thick", name="Thick Crust", price=1.50),
            CustomizationOption(id="pizza_crust_stuffed", name="Stuffed Crust", price=3.00),
        ],
    ),
    CustomizationGroup(
        id="pizza_toppings",
        name="Extra Toppings",
        max_selections=10,
        options=[
            CustomizationOption(id="pizza_top_pepperoni", name="Pepperoni", price=1.50),
            CustomizationOption(id="pizza_top_mushrooms", name="Mushrooms", price=1.00),
            CustomizationOption(id="pizza_top_olives", name="Black Olives", price=1.00),
            CustomizationOption(id="pizza_top_extra_cheese", name="Extra Cheese", price=2.00),
        ],
    ),
]

BURGER_CUSTOMIZATIONS = [
    CustomizationGroup(
        id="burger_cook",
        name="How would you like it cooked?",
        is_required=True,
        max_selections=1,
        options=[
            CustomizationOption(id="burger_cook_medium_rare", name="Medium Rare", price=0),
            CustomizationOption(id="burger_cook_medium", name="Medium", price=0),
            CustomizationOption(id="burger_cook_well_done", name="Well Done", price=0),
        ],
    ),
    CustomizationGroup(
        id="burger_extras",
        name="Add Extras",
        max_selections=5,
        options=[
            CustomizationOption(id="burger_extra_bacon", name="Bacon", price=2.00),
            CustomizationOption(id="burger_extra_avocado", name="Avocado", price=1.50),
            CustomizationOption(id="burger_extra_patty", name="Extra Patty", price=4.00),
        ],
    ),
]


# =============================================================================
# MENUS
# =============================================================================

MENU_ITEMS: List[MenuItem] = [
    MenuItem(id="item_1_1", restaurant_id="rest_1", name="Margherita Pizza", price=16.99,
             category="Pizzas", is_popular=True, customization_groups=PIZZA_CUSTOMIZATIONS),
    MenuItem(id="item_1_2", restaurant_id="rest_1", name="Pepperoni Pizza", price=18.99,
             category="Pizzas", is_popular=True, customization_groups=PIZZA_CUSTOMIZATIONS),
    MenuItem(id="item_1_4", restaurant_id="rest_1", name="Garlic Knots", price=6.99,
             category="Appetizers", is_popular=True),
    MenuItem(id="item_1_6", restaurant_id="rest_1", name="Tiramisu", price=8.99,
             category="Desserts"),
    MenuItem(id="item_2_1", restaurant_id="rest_2", name="Classic Smash Burger", price=12.99,
             category="Burgers", is_popular=True, customization_groups=BURGER_CUSTOMIZATIONS),
    MenuItem(id="item_2_2", restaurant_id="rest_2", name="Bacon BBQ Burger", price=14.99,
             category="Burgers", is_popular=True, customization_groups=BURGER_CUSTOMIZATIONS),
    MenuItem(id="item_2_5", restaurant_id="rest_2", name="Loaded Fries", price=8.99,
             category="Sides"),
    MenuItem(id="item_2_6", restaurant_id="rest_2", name="Milkshake", price=6.99,
             category="Drinks"),
    MenuItem(id="item_3_1", restaurant_id="rest_3", name="Dragon Roll", price=16.99,
             category="Rolls", is_popular=True),
    MenuItem(id="item_3_2", restaurant_id="rest_3", name="Rainbow Roll", price=18.99,
             category="Rolls"),
    MenuItem(id="item_3_4", restaurant_id="rest_3", name="Miso Soup", price=4.99,
             category="Soups"),
    MenuItem(id="item_5_1", restaurant_id="rest_5", name="Street Tacos (3)", price=9.99,
             category="Tacos", is_popular=True),
    MenuItem(id="item_5_2", restaurant_id="rest_5", name="Loaded Burrito", price=12.99,
             category="Burritos"),
    MenuItem(id="item_5_5", restaurant_id="rest_5", name="Churros", price=6.99,
             category="Desserts"),
]


# =============================================================================
# PROMO CODES
# =============================================================================

def build_promo_codes() -> List[PromoCode]:
    """Promo codes with expiry dates relative to now."""
    now = utcnow()
    return [
        PromoCode(
            id="promo_1",
            code="WELCOME50",
            description="50% off your first order",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=50,
            minimum_order=15.0,
            max_discount=15.0,
            valid_until=now + timedelta(days=365),
            usage_limit=1,
            used_count=0,
        ),
        PromoCode(
            id="promo_2",
            code="FREEDELIVERY",
            description="Free delivery on your order",
            discount_type=DiscountType.FREE_DELIVERY,
            minimum_order=15.0,
            valid_until=now + timedelta(days=30),
            usage_limit=100,
            used_count=45,
        ),
        PromoCode(
            id="promo_3",
            code="SAVE10",
            description="$10 off orders over $30",
            discount_type=DiscountType.FIXED,
            discount_value=10,
            minimum_order=30.0,
            valid_until=now + timedelta(days=14),
            usage_limit=50,
            used_count=20,
        ),
    ]


# =============================================================================
# ORDER HISTORY
# =============================================================================

def build_past_orders(user_id: str) -> List[Order]:
    """Two delivered orders shown in the history tab."""
    now = utcnow()
    return [
        Order(
            id="past_order_1",
            order_number="XY789012",
            user_id=user_id,
            restaurant_id="rest_2",
            restaurant_name="Burger Joint",
            items=[
                OrderItem(id="oi_1", menu_item_id="item_2_1", name="Classic Smash Burger",
                          quantity=2, unit_price=12.99),
                OrderItem(id="oi_2", menu_item_id="item_2_5", name="Loaded Fries",
                          quantity=1, unit_price=8.99),
            ],
            status=OrderStatus.DELIVERED,
            subtotal=34.97,
            delivery_fee=1.99,
            service_fee=1.75,
            tax=3.06,
            total=45.77,
            tip_amount=4.00,
            delivery_address="123 Main St, Apt 4B, San Francisco, CA 94102",
            delivery_latitude=37.7749,
            delivery_longitude=-122.4194,
            payment_method_id="pm_1",
            driver_progress=1.0,
            actual_delivery_time=now - timedelta(days=3),
            created_at=now - timedelta(days=3, minutes=40),
            updated_at=now - timedelta(days=3),
            rating=5,
            review="Great burgers! Fast delivery.",
        ),
        Order(
            id="past_order_2",
            order_number="AB345678",
            user_id=user_id,
            restaurant_id="rest_3",
            restaurant_name="Sakura Sushi",
            items=[
                OrderItem(id="oi_3", menu_item_id="item_3_1", name="Dragon Roll",
                          quantity=1, unit_price=16.99),
                OrderItem(id="oi_4", menu_item_id="item_3_2", name="Rainbow Roll",
                          quantity=1, unit_price=18.99),
            ],
            status=OrderStatus.DELIVERED,
            subtotal=35.98,
            delivery_fee=3.99,
            service_fee=1.80,
            tax=3.15,
            total=49.92,
            tip_amount=5.00,
            delivery_address="456 Oak Ave, San Francisco, CA 94103",
            delivery_latitude=37.7849,
            delivery_longitude=-122.4094,
            payment_method_id="pm_1",
            driver_progress=1.0,
            actual_delivery_time=now - timedelta(days=7),
            created_at=now - timedelta(days=7, minutes=50),
            updated_at=now - timedelta(days=7),
            rating=4,
        ),
    ]
