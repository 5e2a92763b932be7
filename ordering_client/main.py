"""
FastAPI Application Entry Point

Cuisine Ordering Client - exposes one ordering session to a front end.
Uses the mock transport in development and the real catalog/payment API
in staging/production.

Endpoints:
    - GET /api/cuisines: Cuisines loaded so far (loads page 1 on first call)
    - POST /api/cuisines/more: Load the next catalog page
    - GET /api/top-dishes: Highest rated dishes
    - GET /api/items/{item_id}: Single dish lookup
    - GET/DELETE /api/cart, POST /api/cart/items: Cart contents and mutations
    - PATCH/DELETE /api/cart/items/{item_id}: Quantity changes
    - POST /api/checkout: Pay for the cart
    - GET /api/orders: Recent orders
    - PUT /api/language: Switch catalog language
    - POST /api/language/toggle: Flip between English and Hindi
    - GET /health: System health check
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

# Internal imports
from ordering_client.core.config import get_settings, setup_logging
from ordering_client.core.exceptions import (
    EmptyCartError,
    OrderingError,
    ServerError,
    TransportError,
)
from ordering_client.models import Cuisine, MenuItem, Order
from ordering_client.schemas import (
    AddToCartRequest,
    UpdateQuantityRequest,
    LanguageRequest,
    CartResponse,
    CuisineListResponse,
    TopDishesResponse,
    CheckoutResponse,
    OrderListResponse,
    ErrorResponse,
    HealthResponse,
)
from ordering_client.services.session import OrderingSession, error_message_key

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_session(request: Request) -> OrderingSession:
    """Dependency returning the session owned by this application."""
    return request.app.state.session


def cart_response(session: OrderingSession) -> CartResponse:
    """Cart contents with totals recomputed from the current lines."""
    cart = session.cart
    return CartResponse(
        items=list(cart.lines),
        item_count=cart.item_count,
        subtotal=cart.subtotal,
        tax_a=cart.tax_a,
        tax_b=cart.tax_b,
        grand_total=cart.grand_total,
        subtotal_display=cart.subtotal_as_int,
        tax_a_display=cart.tax_a_as_int,
        tax_b_display=cart.tax_b_as_int,
        grand_total_display=cart.grand_total_as_int,
    )


def cuisine_list_response(session: OrderingSession) -> CuisineListResponse:
    return CuisineListResponse(
        cuisines=session.cuisines,
        next_page=session.catalog.next_page,
        has_more_pages=session.catalog.has_more_pages,
        language=session.language,
        error=session.error,
    )


def upstream_error(exc: OrderingError) -> HTTPException:
    """Translate a transport failure into a 502 for the caller."""
    return HTTPException(
        status_code=502,
        detail={"error": error_message_key(exc), "message": str(exc)},
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    session_factory: Optional[Callable[[], OrderingSession]] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        session_factory: Builds the session at startup; defaults to one
            configured from settings (tests pass their own)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        # Validate production config
        if settings.use_real_services:
            missing = settings.validate_production_config()
            if missing:
                logger.warning(f"⚠️ Missing production config: {missing}")

        factory = session_factory or (lambda: OrderingSession.from_settings(settings))
        app.state.session = factory()
        logger.info(f"✅ Transport: {app.state.session.transport.provider_name}")
        logger.info("✅ Application ready!")

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await app.state.session.aclose()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Cuisine browsing, cart and checkout for the ordering client. "
            "Supports a mock catalog for development and the real API for production."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


# =============================================================================
# ROUTES
# =============================================================================

def register_routes(app: FastAPI) -> None:

    # -------------------------------------------------------------------------
    # ROOT & HEALTH
    # -------------------------------------------------------------------------

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"🍛 Welcome to {settings.app_name}",
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
        session: OrderingSession = Depends(get_session),
    ) -> HealthResponse:
        """Verify the transport and the store are operational."""
        transport_status = "healthy" if await session.transport.health_check() else "unhealthy"
        storage_status = "healthy" if session.store.health_check() else "unhealthy"

        overall = "operational" if all(
            s == "healthy" for s in [transport_status, storage_status]
        ) else "degraded"

        return HealthResponse(
            status=overall,
            transport=transport_status,
            storage=storage_status,
            timestamp=datetime.now(),
        )

    # -------------------------------------------------------------------------
    # CATALOG
    # -------------------------------------------------------------------------

    @app.get(
        "/api/cuisines",
        response_model=CuisineListResponse,
        tags=["Catalog"],
    )
    async def list_cuisines(
        refresh: bool = Query(False),
        session: OrderingSession = Depends(get_session),
    ) -> CuisineListResponse:
        """Cuisines merged so far; the first call loads page 1."""
        if refresh or not session.cuisines:
            await session.load_catalog(force_refresh=refresh)
        return cuisine_list_response(session)

    @app.post(
        "/api/cuisines/more",
        response_model=CuisineListResponse,
        tags=["Catalog"],
    )
    async def load_more_cuisines(
        session: OrderingSession = Depends(get_session),
    ) -> CuisineListResponse:
        """Load the next catalog page."""
        await session.load_more()
        return cuisine_list_response(session)

    @app.get(
        "/api/cuisines/{cuisine_id}",
        response_model=Cuisine,
        tags=["Catalog"],
    )
    async def get_cuisine(
        cuisine_id: str,
        session: OrderingSession = Depends(get_session),
    ) -> Cuisine:
        """A loaded cuisine and its dishes."""
        cuisine = session.catalog.find_cuisine(cuisine_id)
        if cuisine is None:
            raise HTTPException(status_code=404, detail=f"Cuisine {cuisine_id} not loaded")
        return cuisine

    @app.get(
        "/api/top-dishes",
        response_model=TopDishesResponse,
        tags=["Catalog"],
    )
    async def top_dishes(
        session: OrderingSession = Depends(get_session),
    ) -> TopDishesResponse:
        """Top rated dishes from the sampled catalog."""
        if not session.cuisines:
            await session.load_catalog()
        return TopDishesResponse(dishes=session.top_dishes)

    @app.get(
        "/api/items/{item_id}",
        response_model=MenuItem,
        tags=["Catalog"],
    )
    async def get_item(
        item_id: str,
        session: OrderingSession = Depends(get_session),
    ) -> MenuItem:
        """Look up a single dish upstream."""
        try:
            return await session.fetch_item(item_id)
        except ServerError as e:
            if e.status_code == 404:
                raise HTTPException(status_code=404, detail=e.message)
            raise upstream_error(e)
        except TransportError as e:
            raise upstream_error(e)

    # -------------------------------------------------------------------------
    # CART
    # -------------------------------------------------------------------------

    @app.get("/api/cart", response_model=CartResponse, tags=["Cart"])
    async def get_cart(
        session: OrderingSession = Depends(get_session),
    ) -> CartResponse:
        return cart_response(session)

    @app.post("/api/cart/items", response_model=CartResponse, tags=["Cart"])
    async def add_to_cart(
        request: AddToCartRequest,
        session: OrderingSession = Depends(get_session),
    ) -> CartResponse:
        """Add one unit of a dish. Dishes with unreadable prices are skipped."""
        session.cart.add_item(request.item, request.cuisine_id)
        return cart_response(session)

    @app.patch("/api/cart/items/{item_id}", response_model=CartResponse, tags=["Cart"])
    async def update_cart_item(
        item_id: str,
        request: UpdateQuantityRequest,
        session: OrderingSession = Depends(get_session),
    ) -> CartResponse:
        session.cart.update_quantity(item_id, request.quantity)
        return cart_response(session)

    @app.delete("/api/cart/items/{item_id}", response_model=CartResponse, tags=["Cart"])
    async def remove_cart_item(
        item_id: str,
        session: OrderingSession = Depends(get_session),
    ) -> CartResponse:
        session.cart.remove_item(item_id)
        return cart_response(session)

    @app.delete("/api/cart", response_model=CartResponse, tags=["Cart"])
    async def clear_cart(
        session: OrderingSession = Depends(get_session),
    ) -> CartResponse:
        session.cart.clear()
        return cart_response(session)

    # -------------------------------------------------------------------------
    # CHECKOUT & ORDERS
    # -------------------------------------------------------------------------

    @app.post(
        "/api/checkout",
        response_model=CheckoutResponse,
        responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Pay for the cart",
    )
    async def checkout(
        session: OrderingSession = Depends(get_session),
    ) -> CheckoutResponse:
        """
        Submit the payment for the current cart.

        The cart is only cleared when the payment succeeded.
        """
        try:
            result = await session.place_order()
        except EmptyCartError as e:
            raise HTTPException(
                status_code=400,
                detail={"error": error_message_key(e), "message": str(e)},
            )
        except (ServerError, TransportError) as e:
            raise upstream_error(e)

        return CheckoutResponse(
            success=True,
            message="Order placed successfully!",
            transaction_reference=result.transaction_reference,
            order=result.order,
        )

    @app.get("/api/orders", response_model=OrderListResponse, tags=["Orders"])
    async def list_orders(
        session: OrderingSession = Depends(get_session),
    ) -> OrderListResponse:
        """Recent orders, newest first."""
        orders = list(session.history.orders)
        return OrderListResponse(total=len(orders), orders=orders)

    @app.get("/api/orders/{order_id}", response_model=Order, tags=["Orders"])
    async def get_order(
        order_id: str,
        session: OrderingSession = Depends(get_session),
    ) -> Order:
        order = session.history.get(order_id)
        if order is None:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
        return order

    # -------------------------------------------------------------------------
    # LANGUAGE
    # -------------------------------------------------------------------------

    @app.put("/api/language", response_model=CuisineListResponse, tags=["Catalog"])
    async def change_language(
        request: LanguageRequest,
        session: OrderingSession = Depends(get_session),
    ) -> CuisineListResponse:
        """Switch language; the catalog reloads from page 1."""
        await session.set_language(request.language)
        return cuisine_list_response(session)

    @app.post("/api/language/toggle", response_model=CuisineListResponse, tags=["Catalog"])
    async def toggle_language(
        session: OrderingSession = Depends(get_session),
    ) -> CuisineListResponse:
        """Flip between English and Hindi and reload the catalog."""
        await session.toggle_language()
        return cuisine_list_response(session)

    # -------------------------------------------------------------------------
    # ERROR HANDLERS
    # -------------------------------------------------------------------------

    @app.exception_handler(OrderingError)
    async def ordering_exception_handler(request: Request, exc: OrderingError) -> JSONResponse:
        """Ordering errors not handled by a route."""
        logger.error(f"Unhandled ordering error: {exc}")
        return JSONResponse(
            status_code=502 if isinstance(exc, (ServerError, TransportError)) else 400,
            content={
                "success": False,
                "error": error_message_key(exc),
                "detail": str(exc),
            },
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


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ordering_client.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
