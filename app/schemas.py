"""
Schemas de entrada/saída da API.

Os modelos de tabela ficam em models.py; aqui ficam os DTOs que o FastAPI
valida e serializa. Campos omitidos num PATCH são distinguidos de campos
enviados como null via `model_dump(exclude_unset=True)`.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import OrderStatus, OrderType, Role


# ----- Auth -----
class MeRead(BaseModel):
    user_id: int
    name: str
    role: Role


# ----- Dishes -----
class DishCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., description="Preço de venda (>= 0)")
    image: Optional[str] = None
    category: Optional[str] = None
    available: bool = True


class DishUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    image: Optional[str] = None
    category: Optional[str] = None
    available: Optional[bool] = None


class DishRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: Decimal
    image: Optional[str]
    category: Optional[str]
    available: bool


# ----- Orders -----
class OrderItemIn(BaseModel):
    dish_id: int
    quantity: int
    price: Optional[Decimal] = Field(None, description="Preço capturado; se ausente usa o do prato")
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    type: OrderType
    items: List[OrderItemIn]
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    table_number: Optional[int] = None
    delivery_address: Optional[str] = None


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    table_number: Optional[int] = None
    delivery_address: Optional[str] = None


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dish_id: int
    dish_name: Optional[str] = None
    quantity: int
    price: Decimal
    notes: Optional[str]


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    type: OrderType
    status: OrderStatus
    customer_name: Optional[str]
    customer_phone: Optional[str]
    table_number: Optional[int]
    delivery_address: Optional[str]
    total: Decimal
    user_id: int
    user_name: Optional[str] = None
    created_at: datetime
    items: List[OrderItemRead] = []


# ----- Shift / cashier -----
class DailySummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    total_revenue: Decimal
    total_orders: int
    delivery_orders: int
    mesa_orders: int
    delivery_revenue: Decimal
    mesa_revenue: Decimal
    average_ticket: Decimal
    closed_at: datetime
    closed_by: int


class ShiftCloseResponse(BaseModel):
    success: bool = True
    summary: DailySummaryRead
    deleted_orders: int
    message: str = "Expediente encerrado com sucesso"


class CashierReportRead(BaseModel):
    period: str
    label: str
    start: datetime
    end: datetime
    closed: bool
    total_revenue: Decimal
    orders_count: int
    average_ticket: Decimal
    delivery_revenue: Decimal
    mesa_revenue: Decimal
    delivery_orders: int
    mesa_orders: int
    orders: List[OrderRead] = []


class DashboardRead(BaseModel):
    today_orders: int
    today_revenue: Decimal
    pending_orders: int
    completed_orders: int
    shift_closed: bool
