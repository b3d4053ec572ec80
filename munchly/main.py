"""
FastAPI Application Entry Point

Munchly Eats - food delivery core over HTTP.
All collaborators run as mocks in development; staging and production fall
back to the same mocks until real integrations exist.

Endpoints:
    - GET  /api/restaurants: Browse and search the catalog
    - /api/cart: Cart lines and promo codes
    - /api/orders: Checkout, history, cancel, rating, reorder
    - /api/orders/{id}/tracking: Live driver tracking
    - /api/favorites, /api/searches: Saved preferences
    - GET  /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from munchly.core.config import get_settings, setup_logging
from munchly.dependencies import ServiceContainer, build_container, get_container
from munchly.errors import MunchlyError, RestaurantNotAvailable
from munchly.schemas import (
    AddToCartRequest,
    ApplyPromoRequest,
    CartSummary,
    CheckoutRequest,
    ErrorResponse,
    FavoritesResponse,
    HealthResponse,
    MenuItem,
    Order,
    OrderListResponse,
    RateOrderRequest,
    Restaurant,
    TrackingResponse,
    UpdateQuantityRequest,
    utcnow,
)
from munchly.services.cart import select_customizations

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    current = get_settings()

    logger.info("=" * 60)
    logger.info(f"🚀 Starting {current.app_name}")
    logger.info(f"   Version: {current.app_version}")
    logger.info(f"   Environment: {current.env_mode.value}")
    logger.info(f"   Debug: {current.debug}")
    logger.info("=" * 60)

    container = build_container(current)
    app.state.container = container
    logger.info(f"✅ Catalog Service: {container.catalog.provider_name}")
    logger.info(f"✅ Driver Service: {container.drivers.provider_name}")
    logger.info(f"✅ Payment Service: {container.payment.provider_name}")
    logger.info(f"✅ Notification Service: {container.notifications.provider_name}")
    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await container.close()
    logger.info("✅ Tracking stopped, cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Food delivery core: catalog, cart and pricing, checkout, "
        "order lifecycle and live driver tracking."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def load_restaurant(container: ServiceContainer, restaurant_id: str) -> Restaurant:
    restaurant = await container.catalog.get_restaurant(restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail=f"Restaurant {restaurant_id} not found")
    return restaurant


async def load_menu_item(container: ServiceContainer, menu_item_id: str) -> MenuItem:
    item = await container.catalog.get_menu_item(menu_item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Menu item {menu_item_id} not found")
    return item


def cart_response(container: ServiceContainer) -> CartSummary:
    return container.cart.summary().rounded()


async def add_request_to_cart(
    container: ServiceContainer,
    request: AddToCartRequest,
    replace: bool = False,
) -> CartSummary:
    item = await load_menu_item(container, request.menu_item_id)
    restaurant = await load_restaurant(container, item.restaurant_id)

    if not restaurant.is_open:
        raise RestaurantNotAvailable()
    if not item.is_available:
        raise HTTPException(status_code=409, detail=f"{item.name} is currently unavailable")

    customizations = select_customizations(item, request.option_ids)
    add = container.cart.replace_cart if replace else container.cart.add_item
    add(
        item,
        restaurant,
        quantity=request.quantity,
        special_instructions=request.special_instructions,
        customizations=customizations,
    )
    return cart_response(container)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍔 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthResponse:
    """Verify all system components are operational."""
    services = await container.health()
    overall = "operational" if all(
        status.startswith("healthy") for status in services.values()
    ) else "degraded"

    return HealthResponse(
        status=overall,
        tracked_orders=len(container.tracking.tracked_order_ids),
        timestamp=utcnow(),
        **services,
    )


# =============================================================================
# CATALOG ENDPOINTS
# =============================================================================

@app.get(
    "/api/restaurants",
    response_model=List[Restaurant],
    tags=["Catalog"],
    summary="List or Search Restaurants",
)
async def list_restaurants(
    q: Optional[str] = Query(None, max_length=100, description="Name or cuisine"),
    container: ServiceContainer = Depends(get_container),
) -> List[Restaurant]:
    """All restaurants, or those matching ``q``. Searches are remembered."""
    if q is None or not q.strip():
        return await container.catalog.list_restaurants()

    results = await container.catalog.search_restaurants(q)
    await run_in_threadpool(container.preferences.add_recent_search, q)
    return results


@app.get("/api/restaurants/{restaurant_id}", response_model=Restaurant, tags=["Catalog"])
async def get_restaurant(
    restaurant_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Restaurant:
    return await load_restaurant(container, restaurant_id)


@app.get("/api/restaurants/{restaurant_id}/menu", response_model=List[MenuItem], tags=["Catalog"])
async def get_menu(
    restaurant_id: str,
    container: ServiceContainer = Depends(get_container),
) -> List[MenuItem]:
    await load_restaurant(container, restaurant_id)
    return await container.catalog.get_menu(restaurant_id)


# =============================================================================
# CART ENDPOINTS
# =============================================================================

@app.get("/api/cart", response_model=CartSummary, tags=["Cart"])
async def get_cart(container: ServiceContainer = Depends(get_container)) -> CartSummary:
    """Current cart with fees, tax and discount rounded to cents."""
    return cart_response(container)


@app.post(
    "/api/cart/items",
    response_model=CartSummary,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Cart"],
    summary="Add Item to Cart",
)
async def add_cart_item(
    request: AddToCartRequest,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    """
    Add a menu item. Identical lines are merged.

    Answers 409 ``different_restaurant`` when the cart holds another
    restaurant's items; use ``POST /api/cart/replace`` to start over.
    """
    return await add_request_to_cart(container, request)


@app.post("/api/cart/replace", response_model=CartSummary, tags=["Cart"])
async def replace_cart(
    request: AddToCartRequest,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    """Clear the cart and add the item."""
    return await add_request_to_cart(container, request, replace=True)


@app.patch("/api/cart/items/{line_id}", response_model=CartSummary, tags=["Cart"])
async def update_cart_item(
    line_id: str,
    request: UpdateQuantityRequest,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    """Set a line's quantity; zero removes it."""
    container.cart.update_quantity(line_id, request.quantity)
    return cart_response(container)


@app.delete("/api/cart/items/{line_id}", response_model=CartSummary, tags=["Cart"])
async def remove_cart_item(
    line_id: str,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    container.cart.remove_item(line_id)
    return cart_response(container)


@app.delete("/api/cart", response_model=CartSummary, tags=["Cart"])
async def clear_cart(container: ServiceContainer = Depends(get_container)) -> CartSummary:
    container.cart.clear()
    return cart_response(container)


@app.post(
    "/api/cart/promo",
    response_model=CartSummary,
    responses={400: {"model": ErrorResponse}},
    tags=["Cart"],
)
async def apply_promo(
    request: ApplyPromoRequest,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    await container.cart.apply_promo_code(request.code)
    return cart_response(container)


@app.delete("/api/cart/promo", response_model=CartSummary, tags=["Cart"])
async def remove_promo(container: ServiceContainer = Depends(get_container)) -> CartSummary:
    container.cart.remove_promo_code()
    return cart_response(container)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=Order,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 402: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Checkout",
)
async def create_order(
    request: CheckoutRequest,
    container: ServiceContainer = Depends(get_container),
) -> Order:
    """
    Charge the cart and place the order.

    Tracking starts right away unless ``start_tracking`` is false.
    """
    order = await container.orders.place_order(
        container.cart,
        request.delivery_address,
        request.payment_method_id,
        tip_amount=request.tip_amount,
        instructions=request.delivery_instructions,
    )
    if request.start_tracking:
        await container.tracking.start(order.id)
    return order


@app.get("/api/orders", response_model=OrderListResponse, tags=["Orders"])
async def list_orders(container: ServiceContainer = Depends(get_container)) -> OrderListResponse:
    """Active and past orders, most recent first."""
    return OrderListResponse(
        active=container.orders.active_orders(),
        past=container.orders.past_orders(),
    )


@app.get(
    "/api/orders/{order_id}",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Order:
    return container.orders.get_order(order_id)


@app.post("/api/orders/{order_id}/advance", response_model=Order, tags=["Orders"])
async def advance_order(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Order:
    """Move the order one status forward without waiting for the timer."""
    return await container.tracking.advance(order_id)


@app.post(
    "/api/orders/{order_id}/cancel",
    response_model=Order,
    responses={409: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def cancel_order(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Order:
    order = await container.orders.cancel_order(order_id)
    container.tracking.stop(order_id)
    return order


@app.post("/api/orders/{order_id}/rating", response_model=Order, tags=["Orders"])
async def rate_order(
    order_id: str,
    request: RateOrderRequest,
    container: ServiceContainer = Depends(get_container),
) -> Order:
    return container.orders.rate_order(order_id, request.rating, request.review)


@app.post("/api/orders/{order_id}/reorder", response_model=CartSummary, tags=["Orders"])
async def reorder(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> CartSummary:
    """Replace the cart with the items of a previous order."""
    await container.orders.reorder(order_id, container.cart)
    return cart_response(container)


# =============================================================================
# TRACKING ENDPOINTS
# =============================================================================

@app.post("/api/orders/{order_id}/tracking", response_model=TrackingResponse, tags=["Tracking"])
async def start_tracking(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> TrackingResponse:
    """Track this order; any other tracked order stops."""
    await container.tracking.start(order_id)
    return container.tracking.snapshot(order_id)


@app.get("/api/orders/{order_id}/tracking", response_model=TrackingResponse, tags=["Tracking"])
async def get_tracking(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> TrackingResponse:
    return container.tracking.snapshot(order_id)


@app.delete("/api/orders/{order_id}/tracking", response_model=TrackingResponse, tags=["Tracking"])
async def stop_tracking(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> TrackingResponse:
    snapshot = container.tracking.snapshot(order_id)
    container.tracking.stop(order_id)
    return snapshot.model_copy(update={"is_tracking": False})


# =============================================================================
# PREFERENCES ENDPOINTS
# =============================================================================

# The preferences file lock blocks; keep it off the event loop.

@app.get("/api/favorites", response_model=FavoritesResponse, tags=["Preferences"])
def get_favorites(container: ServiceContainer = Depends(get_container)) -> FavoritesResponse:
    document = container.preferences.load()
    return FavoritesResponse(
        restaurant_ids=document.favorite_restaurant_ids,
        menu_item_ids=document.favorite_menu_item_ids,
    )


@app.post("/api/favorites/restaurants/{restaurant_id}", tags=["Preferences"])
async def toggle_favorite_restaurant(
    restaurant_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    await load_restaurant(container, restaurant_id)
    is_favorite = await run_in_threadpool(container.preferences.toggle_favorite_restaurant, restaurant_id)
    return {"restaurant_id": restaurant_id, "is_favorite": is_favorite}


@app.post("/api/favorites/menu-items/{menu_item_id}", tags=["Preferences"])
async def toggle_favorite_menu_item(
    menu_item_id: str,
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    await load_menu_item(container, menu_item_id)
    is_favorite = await run_in_threadpool(container.preferences.toggle_favorite_menu_item, menu_item_id)
    return {"menu_item_id": menu_item_id, "is_favorite": is_favorite}


@app.delete("/api/favorites", response_model=FavoritesResponse, tags=["Preferences"])
def clear_favorites(container: ServiceContainer = Depends(get_container)) -> FavoritesResponse:
    container.preferences.clear_favorites()
    return FavoritesResponse(restaurant_ids=[], menu_item_ids=[])


@app.get("/api/searches", tags=["Preferences"])
def get_recent_searches(container: ServiceContainer = Depends(get_container)) -> Dict[str, List[str]]:
    return {"recent_searches": container.preferences.recent_searches()}


@app.delete("/api/searches", tags=["Preferences"])
def clear_recent_searches(container: ServiceContainer = Depends(get_container)) -> Dict[str, List[str]]:
    container.preferences.clear_recent_searches()
    return {"recent_searches": []}


@app.delete("/api/searches/{query}", tags=["Preferences"])
def remove_recent_search(
    query: str,
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, List[str]]:
    return {"recent_searches": container.preferences.remove_recent_search(query)}


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(MunchlyError)
async def munchly_exception_handler(request: Request, exc: MunchlyError) -> JSONResponse:
    """Map domain errors to their HTTP status and machine code."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, code=exc.code).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
