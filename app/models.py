# app/models.py
# Sem `from __future__ import annotations`: o SQLModel precisa resolver os
# tipos dos Relationship em tempo de execução.
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Role(str, Enum):
    ADMIN = "ADMIN"
    GARCOM = "GARCOM"


class OrderType(str, Enum):
    MESA = "MESA"
    DELIVERY = "DELIVERY"


class OrderStatus(str, Enum):
    ABERTO = "ABERTO"
    FECHADO = "FECHADO"
    DELIVERY = "DELIVERY"
    CANCELADO = "CANCELADO"
    # fluxo de cozinha
    PENDENTE = "PENDENTE"
    EM_PREPARO = "EM_PREPARO"
    PRONTO = "PRONTO"
    ENTREGUE = "ENTREGUE"


# status que entram no fechamento do caixa
SETTLED_STATUSES = (OrderStatus.FECHADO, OrderStatus.DELIVERY)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, sa_column_kwargs={"unique": True})
    name: str
    password_hash: str
    role: Role = Field(default=Role.GARCOM)


class Dish(SQLModel, table=True):
    __tablename__ = "dish"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    image: Optional[str] = None
    category: Optional[str] = Field(default=None, index=True)
    available: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, sa_column_kwargs={"unique": True})
    type: OrderType
    status: OrderStatus
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    table_number: Optional[int] = None
    delivery_address: Optional[str] = None
    total: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    user_id: int = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now, index=True)
    updated_at: datetime = Field(default_factory=datetime.now)

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    user: Optional[User] = Relationship()

    @property
    def user_name(self) -> Optional[str]:
        return self.user.name if self.user else None


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    dish_id: int = Field(foreign_key="dish.id", index=True)
    quantity: int
    price: Decimal = Field(max_digits=10, decimal_places=2)  # preço capturado no pedido
    notes: Optional[str] = None

    order: Optional[Order] = Relationship(back_populates="items")
    dish: Optional[Dish] = Relationship()

    @property
    def dish_name(self) -> Optional[str]:
        return self.dish.name if self.dish else None


class DailySummary(SQLModel, table=True):
    __tablename__ = "daily_summary"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: datetime = Field(sa_column_kwargs={"unique": True})  # início do dia
    total_revenue: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    total_orders: int = 0
    delivery_orders: int = 0
    mesa_orders: int = 0
    delivery_revenue: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    mesa_revenue: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    average_ticket: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    closed_at: datetime = Field(default_factory=datetime.now)
    closed_by: int = Field(foreign_key="users.id")
