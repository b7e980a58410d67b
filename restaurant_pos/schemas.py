"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase (``menuItemId``, ``totalAmount``, ``assignedTo``);
Python code uses the snake_case field names.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from restaurant_pos.models import OrderStatus, canonical_id, is_valid_id


EMPTY_ORDER_MESSAGE = "Invalid or empty order items provided."

# Largest quantity the INTEGER stock columns can hold
MAX_QUANTITY = 2**31 - 1


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def describe_validation_error(exc: ValidationError) -> str:
    """Turn the first pydantic error into a single human-readable message."""
    error = exc.errors()[0]
    if error["type"] == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    location = ".".join(str(part) for part in error["loc"])
    if location:
        return f"Invalid value for {location}: {error['msg']}"
    return error["msg"]


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class CartItem(CamelModel):
    """Single cart line as submitted by the cashier."""
    menu_item_id: Optional[str] = Field(None, examples=["9b2f6a38-5d0e-4c1b-9a55-0f3f0f1d2c11"])
    name: Optional[str] = Field(None, examples=["Nala"])
    price: Optional[float] = Field(None, examples=[400])
    quantity: Optional[int] = Field(None, examples=[2])
    image: Optional[str] = None
    overridden_price: Optional[float] = None

    @field_validator("menu_item_id")
    @classmethod
    def normalize_menu_item_id(cls, v: Optional[str]) -> Optional[str]:
        # Malformed ids are kept as sent and rejected by check_line_item
        return canonical_id(v) or v

    @model_validator(mode="after")
    def check_line_item(self) -> "CartItem":
        if (
            not is_valid_id(self.menu_item_id)
            or not self.quantity
            or self.quantity <= 0
            or self.quantity > MAX_QUANTITY
            or self.price is None
            or self.price < 0
            or (self.overridden_price is not None and self.overridden_price < 0)
        ):
            raise ValueError(f"Invalid data for cart item: {self.name or self.menu_item_id}")
        return self


class OrderCreate(CamelModel):
    """Request schema for placing an order."""
    items: List[CartItem]
    customer_name: Optional[str] = Field(None, max_length=100, examples=["Asha"])
    customer_phone: Optional[str] = Field(None, max_length=20, examples=["9820012345"])
    total_amount: float = Field(..., ge=0, examples=[800])

    @model_validator(mode="before")
    @classmethod
    def check_order_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError(EMPTY_ORDER_MESSAGE)
        items = data.get("items")
        total = data.get("totalAmount", data.get("total_amount"))
        if not isinstance(items, list) or not items or total is None:
            raise ValueError(EMPTY_ORDER_MESSAGE)
        if isinstance(total, (int, float)) and not isinstance(total, bool) and total < 0:
            raise ValueError(EMPTY_ORDER_MESSAGE)
        return data

    @field_validator("customer_name", "customer_phone", mode="before")
    @classmethod
    def strip_customer_fields(cls, v: Any) -> Any:
        return _blank_to_none(v)


class OrderUpdate(CamelModel):
    """
    Partial update of an order's status and/or assignee.

    A null or empty ``status`` counts as not supplied. ``assignedTo`` is
    supplied whenever the key is present; blank values mean "unassigned".
    """
    status: Optional[OrderStatus] = Field(None, examples=["InProgress"])
    assigned_to: Optional[str] = Field(None, max_length=100, examples=["Sam"])

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if v not in OrderStatus.values():
            allowed = ", ".join(OrderStatus.values())
            raise ValueError(f"Invalid status value: '{v}'. Allowed statuses are: {allowed}")
        return v

    @field_validator("assigned_to", mode="before")
    @classmethod
    def normalize_assignee(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def assigns(self) -> bool:
        return "assigned_to" in self.model_fields_set

    @property
    def has_changes(self) -> bool:
        return self.status is not None or self.assigns


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderItemResponse(CamelModel):
    menu_item_id: str
    name: str
    quantity: int
    price_per_item: float
    overridden_price_per_item: Optional[float] = None


class OrderResponse(CamelModel):
    """Response schema for a single order."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    customer_name: Optional[str]
    customer_phone: Optional[str]
    items: List[OrderItemResponse]
    total_amount: float
    status: OrderStatus
    assigned_to: Optional[str]
    payment_received: bool
    created_at: datetime
    updated_at: datetime


class MenuItemResponse(CamelModel):
    """A menu entry as shown to the cashier."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    name: str
    description: str
    price: float
    category: str
    vegetarian: bool
    images: List[str]
    allergens: List[str]
    ingredients: List[str]
    initial_stock: int
    current_stock: int


class KitchenTicket(CamelModel):
    """An order plus the single workflow action the kitchen can take next."""
    order: OrderResponse
    next_status: Optional[OrderStatus] = None
    next_action: Optional[str] = None


class ActiveOrdersResponse(CamelModel):
    total: int
    tickets: List[KitchenTicket]


class KanbanColumnResponse(CamelModel):
    title: str
    statuses: List[OrderStatus]
    tickets: List[KitchenTicket]


class KanbanBoardResponse(CamelModel):
    columns: List[KanbanColumnResponse]


class ErrorResponse(BaseModel):
    """Standard error response."""
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
