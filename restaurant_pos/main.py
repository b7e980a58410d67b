"""
FastAPI Application Entry Point

Restaurant POS order service.

Endpoints:
    - GET /menu: Menu with live stock (cashier)
    - POST /orders: Place an order, reserving stock atomically
    - GET /orders/{order_id}: Fetch one order
    - PATCH /orders/{order_id}: Update status and/or assignee
    - GET /kitchen/orders: Active orders (Confirmed, InProgress)
    - GET /kitchen/board: Kanban board
    - GET /health: System health check

Run with:
    uvicorn restaurant_pos.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional, Type, TypeVar

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.core.config import Settings, get_settings, setup_logging
from restaurant_pos.core.exceptions import (
    InvalidInputError,
    MalformedPayloadError,
    OrderServiceError,
    UnexpectedError,
)
from restaurant_pos.database import Database, get_db
from restaurant_pos.schemas import (
    ActiveOrdersResponse,
    ErrorResponse,
    HealthResponse,
    KanbanBoardResponse,
    KanbanColumnResponse,
    MenuItemResponse,
    OrderCreate,
    OrderResponse,
    OrderUpdate,
    describe_validation_error,
)
from restaurant_pos.services.kitchen import fetch_active_orders, fetch_kanban_board, to_ticket
from restaurant_pos.services.orders import OrderCoordinator, OrderStateMachine, ensure_order_id
from restaurant_pos.services.stock import fetch_menu

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# =============================================================================
# DEPENDENCIES & HELPERS
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def parse_payload(request: Request, schema: Type[PayloadT]) -> PayloadT:
    """Read the JSON body and validate it against ``schema``."""
    try:
        data = await request.json()
    except ValueError as e:
        raise MalformedPayloadError() from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(describe_validation_error(e)) from e


def error_body(exc: OrderServiceError, settings: Settings) -> dict[str, Any]:
    body: dict[str, Any] = {"message": exc.message}
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        body["error"] = str(cause) if settings.debug else "Internal Server Error"
    return body


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings; defaults to ``get_settings()``
        database: Pre-built Database (tests); defaults to one built from settings
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Strict status transitions: {settings.enforce_status_transitions}")
        logger.info("=" * 60)

        await app.state.database.create_all()
        logger.info("✅ Application ready!")

        yield  # Application runs

        logger.info("Shutting down...")
        await app.state.database.dispose()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description="Cashier order placement with live stock and kitchen order tracking.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = database or Database(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    register_error_handlers(app)
    return app


# =============================================================================
# ROUTES
# =============================================================================

def register_routes(app: FastAPI) -> None:

    @app.get("/", tags=["Root"])
    async def root(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/health",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """Verify the database is reachable."""
        database: Database = request.app.state.database
        healthy = await database.ping()
        return HealthResponse(
            status="operational" if healthy else "degraded",
            database="healthy" if healthy else "unhealthy",
            timestamp=datetime.now(),
        )

    # -------------------------------------------------------------------------
    # Cashier
    # -------------------------------------------------------------------------

    @app.get("/menu", response_model=list[MenuItemResponse], tags=["Menu"])
    async def list_menu(db: AsyncSession = Depends(get_db)) -> list[MenuItemResponse]:
        """Menu items sorted by category then name, with current stock."""
        items = await fetch_menu(db)
        return [MenuItemResponse.model_validate(item) for item in items]

    @app.post(
        "/orders",
        response_model=OrderResponse,
        status_code=201,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
        summary="Place Order",
    )
    async def create_order(
        request: Request,
        db: AsyncSession = Depends(get_db),
    ) -> OrderResponse:
        """
        Place an order from a cashier cart.

        Stock for every line is reserved in the same transaction as the order
        insert; if any line is short, nothing is saved.
        """
        order_data = await parse_payload(request, OrderCreate)
        logger.info(f"Placing order with {len(order_data.items)} line item(s)")

        try:
            order = await OrderCoordinator(db).place_order(order_data)
        except OrderServiceError:
            raise
        except Exception as e:
            logger.exception(f"Error creating order: {e}")
            raise UnexpectedError("Failed to create order due to an unexpected error.") from e

        return OrderResponse.model_validate(order)

    @app.get(
        "/orders/{order_id}",
        response_model=OrderResponse,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
    )
    async def get_order(order_id: str, db: AsyncSession = Depends(get_db)) -> OrderResponse:
        """Get a specific order by ID."""
        try:
            order = await OrderStateMachine(db).get_order(order_id)
        except OrderServiceError:
            raise
        except Exception as e:
            logger.exception(f"Error fetching order {order_id}: {e}")
            raise UnexpectedError("Failed to fetch order") from e
        return OrderResponse.model_validate(order)

    @app.patch(
        "/orders/{order_id}",
        response_model=OrderResponse,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
        summary="Update Order Status / Assignee",
    )
    async def update_order(
        order_id: str,
        request: Request,
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_app_settings),
    ) -> OrderResponse:
        """Partially update an order's status and/or assignee."""
        order_id = ensure_order_id(order_id)
        changes = await parse_payload(request, OrderUpdate)

        machine = OrderStateMachine(db, enforce_transitions=settings.enforce_status_transitions)
        try:
            order = await machine.update_order(order_id, changes)
        except OrderServiceError:
            raise
        except Exception as e:
            logger.exception(f"Error updating order {order_id}: {e}")
            raise UnexpectedError("Failed to update order.") from e

        return OrderResponse.model_validate(order)

    # -------------------------------------------------------------------------
    # Kitchen
    # -------------------------------------------------------------------------

    @app.get("/kitchen/orders", response_model=ActiveOrdersResponse, tags=["Kitchen"])
    async def kitchen_orders(db: AsyncSession = Depends(get_db)) -> ActiveOrdersResponse:
        """Confirmed and in-progress orders, oldest first."""
        orders = await fetch_active_orders(db)
        return ActiveOrdersResponse(
            total=len(orders),
            tickets=[to_ticket(order) for order in orders],
        )

    @app.get("/kitchen/board", response_model=KanbanBoardResponse, tags=["Kitchen"])
    async def kitchen_board(db: AsyncSession = Depends(get_db)) -> KanbanBoardResponse:
        """Kanban columns: Pending / Confirmed, In Progress, Ready, Delivered."""
        board = await fetch_kanban_board(db)
        return KanbanBoardResponse(
            columns=[
                KanbanColumnResponse(
                    title=column.title,
                    statuses=list(column.column.statuses),
                    tickets=[to_ticket(order) for order in column.orders],
                )
                for column in board
            ]
        )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(OrderServiceError)
    async def order_service_error_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc, request.app.state.settings),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")
        settings: Settings = request.app.state.settings
        return JSONResponse(
            status_code=500,
            content={
                "message": "An unexpected error occurred",
                "error": str(exc) if settings.debug else "Internal Server Error",
            },
        )


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "restaurant_pos.main:create_app",
        factory=True,
        host=_settings.api_host,
        port=_settings.api_port,
    )
