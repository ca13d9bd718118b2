# app/shift.py
"""
Fechamento de expediente.

Consolida os pedidos do dia num DailySummary e remove os pedidos do dia.
Tudo acontece numa única transação: se algo falhar, nada é gravado nem
apagado. Só são apagados os pedidos lidos no início do fechamento; um
pedido criado no meio do processo sobrevive para o próximo fechamento.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from sqlmodel import Session, select

from .auth import AuthContext
from .models import SETTLED_STATUSES, DailySummary, Order, OrderType
from .utils import average, day_window, money, money_sum

logger = logging.getLogger(__name__)


@dataclass
class ShiftTotals:
    total_orders: int
    total_revenue: Decimal
    delivery_orders: int
    delivery_revenue: Decimal
    mesa_orders: int
    mesa_revenue: Decimal

    @property
    def average_ticket(self) -> Decimal:
        return average(self.total_revenue, self.total_orders)


def aggregate(orders: Sequence[Order]) -> ShiftTotals:
    """Soma apenas pedidos FECHADO ou DELIVERY; abertos e cancelados ficam de fora."""
    settled = [o for o in orders if o.status in SETTLED_STATUSES]
    delivery = [o for o in settled if o.type == OrderType.DELIVERY]
    mesa = [o for o in settled if o.type == OrderType.MESA]
    return ShiftTotals(
        total_orders=len(settled),
        total_revenue=money_sum(o.total for o in settled),
        delivery_orders=len(delivery),
        delivery_revenue=money_sum(o.total for o in delivery),
        mesa_orders=len(mesa),
        mesa_revenue=money_sum(o.total for o in mesa),
    )


def _merge(summary: DailySummary, totals: ShiftTotals) -> None:
    summary.total_orders += totals.total_orders
    summary.total_revenue = money(summary.total_revenue + totals.total_revenue)
    summary.delivery_orders += totals.delivery_orders
    summary.delivery_revenue = money(summary.delivery_revenue + totals.delivery_revenue)
    summary.mesa_orders += totals.mesa_orders
    summary.mesa_revenue = money(summary.mesa_revenue + totals.mesa_revenue)
    summary.average_ticket = average(summary.total_revenue, summary.total_orders)


def get_summary(session: Session, day_start: datetime) -> Optional[DailySummary]:
    return session.exec(select(DailySummary).where(DailySummary.date == day_start)).first()


def close_shift(session: Session, ctx: AuthContext, now: Optional[datetime] = None):
    """
    Fecha o expediente do dia de `now` (padrão: agora).

    Retorna (summary, pedidos_apagados). Um segundo fechamento no mesmo dia
    soma os pedidos novos ao resumo existente.
    """
    moment = now or datetime.now()
    start, end = day_window(moment)

    try:
        orders = list(
            session.exec(
                select(Order).where(Order.created_at >= start, Order.created_at < end)
            ).all()
        )
        totals = aggregate(orders)

        summary = get_summary(session, start)
        if summary is None:
            summary = DailySummary(
                date=start,
                total_revenue=money(0),
                delivery_revenue=money(0),
                mesa_revenue=money(0),
                average_ticket=money(0),
                closed_by=ctx.user_id,
            )
        _merge(summary, totals)
        summary.closed_at = moment
        summary.closed_by = ctx.user_id
        session.add(summary)

        # itens vão junto pelo cascade do relacionamento
        for order in orders:
            session.delete(order)

        session.commit()
    except Exception:
        session.rollback()
        logger.warning("fechamento de %s revertido", start.date())
        raise

    session.refresh(summary)
    logger.info(
        "expediente %s fechado por %s: %d pedidos, receita %s, %d pedidos removidos",
        start.date(), ctx.user_id, totals.total_orders, totals.total_revenue, len(orders),
    )
    return summary, len(orders)
