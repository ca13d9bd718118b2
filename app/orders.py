# app/orders.py
"""
Ciclo de vida dos pedidos.

- MESA nasce ABERTO e pode ir para FECHADO (fechar conta) ou CANCELADO.
- DELIVERY nasce com status DELIVERY e nunca muda.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .auth import AuthContext
from .errors import InternalError, InvalidTransition, NotFound, ValidationError
from .models import Dish, Order, OrderItem, OrderStatus, OrderType
from .schemas import OrderCreate, OrderUpdate
from .utils import money, money_sum

logger = logging.getLogger(__name__)

ORDER_NUMBER_RETRIES: int = int(os.getenv("ORDER_NUMBER_RETRIES", "3"))
ORDER_LIST_LIMIT: int = int(os.getenv("ORDER_LIST_LIMIT", "100"))

# filtros "amigáveis" da listagem
STATUS_FILTERS = {
    "pending": (OrderStatus.PENDENTE, OrderStatus.EM_PREPARO),
    "completed": (OrderStatus.ENTREGUE,),
}


def format_order_number(seq: int) -> str:
    return f"ORD-{seq:06d}"


def _next_order_number(session: Session, skip: int = 0) -> str:
    count = session.exec(select(func.count()).select_from(Order)).one()
    return format_order_number(count + 1 + skip)


def initial_status(order_type: OrderType) -> OrderStatus:
    return OrderStatus.DELIVERY if order_type == OrderType.DELIVERY else OrderStatus.ABERTO


def _build_items(session: Session, data: OrderCreate) -> List[dict]:
    if not data.items:
        raise ValidationError("O pedido precisa de pelo menos um item.")
    items: List[dict] = []
    for it in data.items:
        if it.quantity <= 0:
            raise ValidationError("Quantidade deve ser maior que zero.")
        dish = session.get(Dish, it.dish_id)
        if dish is None:
            raise ValidationError(f"Prato não encontrado: {it.dish_id}")
        price = dish.price if it.price is None else it.price
        if price < 0:
            raise ValidationError("Preço do item não pode ser negativo.")
        items.append(
            {"dish_id": dish.id, "quantity": it.quantity, "price": money(price), "notes": it.notes}
        )
    return items


def create_order(session: Session, ctx: AuthContext, data: OrderCreate) -> Order:
    items = _build_items(session, data)
    total = money_sum(i["price"] * i["quantity"] for i in items)

    # número sequencial protegido pela constraint unique; em conflito avança e tenta de novo
    for attempt in range(ORDER_NUMBER_RETRIES + 1):
        order = Order(
            order_number=_next_order_number(session, skip=attempt),
            type=data.type,
            status=initial_status(data.type),
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            table_number=data.table_number,
            delivery_address=data.delivery_address,
            total=total,
            user_id=ctx.user_id,
            items=[OrderItem(**i) for i in items],
        )
        session.add(order)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning("número %s já usado (tentativa %d)", order.order_number, attempt + 1)
            continue
        session.refresh(order)
        logger.info("pedido %s (%s) criado por %s", order.order_number, order.type.value, ctx.user_id)
        return order

    raise InternalError("Não foi possível gerar o número do pedido.")


def get_order(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound("Pedido não encontrado.")
    return order


def list_orders(
    session: Session,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Order]:
    """Pedidos mais recentes primeiro. `status` aceita um status exato, "pending" ou "completed"."""
    stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if status:
        if status in STATUS_FILTERS:
            stmt = stmt.where(Order.status.in_(STATUS_FILTERS[status]))
        else:
            try:
                stmt = stmt.where(Order.status == OrderStatus(status))
            except ValueError:
                raise ValidationError(f"Filtro de status inválido: {status}")
    if limit is not None and limit < 1:
        raise ValidationError("Limite deve ser maior que zero.")
    stmt = stmt.limit(limit or ORDER_LIST_LIMIT)
    return list(session.exec(stmt).all())


def _check_status_change(order: Order, new_status: OrderStatus) -> None:
    if order.type == OrderType.DELIVERY:
        if new_status != order.status:
            raise InvalidTransition("Pedidos de delivery não podem ter o status alterado.")
        return
    if new_status == OrderStatus.DELIVERY:
        raise InvalidTransition("Pedidos de mesa não podem receber o status DELIVERY.")


def update_order(session: Session, ctx: AuthContext, order_id: int, data: OrderUpdate) -> Order:
    order = get_order(session, order_id)
    fields = data.model_dump(exclude_unset=True)

    if "status" in fields:
        new_status = fields.pop("status")
        if new_status is None:
            raise ValidationError("Status não pode ser vazio.")
        try:
            _check_status_change(order, new_status)
        except InvalidTransition:
            logger.warning(
                "transição recusada: pedido %s %s %s -> %s",
                order.order_number, order.type.value, order.status.value, new_status.value,
            )
            raise
        if order.status == OrderStatus.FECHADO and new_status != OrderStatus.FECHADO:
            logger.info("pedido %s reaberto como %s por %s", order.order_number, new_status.value, ctx.user_id)
        order.status = new_status

    # demais campos: presentes no PATCH são gravados, inclusive null/""
    for field, value in fields.items():
        setattr(order, field, value)

    order.updated_at = datetime.now()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def close_order(session: Session, ctx: AuthContext, order_id: int) -> Order:
    order = get_order(session, order_id)
    if order.type != OrderType.MESA:
        raise InvalidTransition("Apenas pedidos de mesa podem ser fechados.")
    if order.status != OrderStatus.ABERTO:
        raise InvalidTransition("Apenas pedidos abertos podem ser fechados.")
    order.status = OrderStatus.FECHADO
    order.updated_at = datetime.now()
    session.add(order)
    session.commit()
    session.refresh(order)
    logger.info("pedido %s fechado por %s", order.order_number, ctx.user_id)
    return order
