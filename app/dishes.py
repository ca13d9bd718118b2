# app/dishes.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from .auth import AuthContext, require_admin
from .errors import NotFound, ValidationError
from .models import Dish, OrderItem
from .schemas import DishCreate, DishUpdate
from .utils import money

logger = logging.getLogger(__name__)


def _check_fields(fields: dict) -> dict:
    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise ValidationError("Nome do prato é obrigatório.")
        fields["name"] = name
    if "price" in fields:
        if fields["price"] is None:
            raise ValidationError("Preço do prato é obrigatório.")
        if fields["price"] < 0:
            raise ValidationError("Preço não pode ser negativo.")
        fields["price"] = money(fields["price"])
    if "available" in fields and fields["available"] is None:
        raise ValidationError("Disponibilidade inválida.")
    return fields


def list_dishes(session: Session, available_only: bool = False) -> List[Dish]:
    stmt = select(Dish).order_by(Dish.name)
    if available_only:
        stmt = stmt.where(Dish.available == True)  # noqa: E712
    return list(session.exec(stmt).all())


def get_dish(session: Session, dish_id: int) -> Dish:
    dish = session.get(Dish, dish_id)
    if dish is None:
        raise NotFound("Prato não encontrado.")
    return dish


def create_dish(session: Session, ctx: AuthContext, data: DishCreate) -> Dish:
    require_admin(ctx)
    dish = Dish(**_check_fields(data.model_dump()))
    session.add(dish)
    session.commit()
    session.refresh(dish)
    logger.info("prato %s criado por %s", dish.id, ctx.user_id)
    return dish


def update_dish(session: Session, ctx: AuthContext, dish_id: int, data: DishUpdate) -> Dish:
    """Atualização parcial. Itens de pedidos já gravados mantêm o preço capturado."""
    require_admin(ctx)
    dish = get_dish(session, dish_id)
    for field, value in _check_fields(data.model_dump(exclude_unset=True)).items():
        setattr(dish, field, value)
    dish.updated_at = datetime.now()
    session.add(dish)
    session.commit()
    session.refresh(dish)
    return dish


def delete_dish(session: Session, ctx: AuthContext, dish_id: int) -> None:
    require_admin(ctx)
    dish = get_dish(session, dish_id)
    in_use = session.exec(
        select(func.count()).select_from(OrderItem).where(OrderItem.dish_id == dish_id)
    ).one()
    if in_use:
        raise ValidationError("Prato está em pedidos e não pode ser excluído.")
    session.delete(dish)
    session.commit()
    logger.info("prato %s excluído por %s", dish_id, ctx.user_id)
