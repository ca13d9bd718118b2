# app/cashier.py
"""
Relatórios de caixa (somente leitura).

daily: se o dia já foi fechado, usa só o DailySummary; senão calcula a partir
dos pedidos vivos do dia, ignorando CANCELADO.
monthly / quarterly / yearly: soma os DailySummary do período. Pedidos de
hoje ainda não fechados não entram nesses totais.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from .errors import ValidationError
from .models import DailySummary, Order, OrderStatus, OrderType
from .schemas import CashierReportRead, DashboardRead, OrderRead
from .shift import get_summary
from .utils import PERIODS, average, day_window, money, money_sum, period_window


def _daily_live(session: Session, start: datetime, end: datetime) -> dict:
    orders = list(
        session.exec(
            select(Order)
            .where(
                Order.created_at >= start,
                Order.created_at < end,
                Order.status != OrderStatus.CANCELADO,
            )
            .order_by(Order.created_at.desc())
        ).all()
    )
    delivery = [o for o in orders if o.type == OrderType.DELIVERY]
    mesa = [o for o in orders if o.type == OrderType.MESA]
    revenue = money_sum(o.total for o in orders)
    return dict(
        closed=False,
        total_revenue=revenue,
        orders_count=len(orders),
        average_ticket=average(revenue, len(orders)),
        delivery_revenue=money_sum(o.total for o in delivery),
        mesa_revenue=money_sum(o.total for o in mesa),
        delivery_orders=len(delivery),
        mesa_orders=len(mesa),
        orders=[OrderRead.model_validate(o) for o in orders],
    )


def _from_summary(summary: DailySummary) -> dict:
    return dict(
        closed=True,
        total_revenue=money(summary.total_revenue),
        orders_count=summary.total_orders,
        average_ticket=money(summary.average_ticket),
        delivery_revenue=money(summary.delivery_revenue),
        mesa_revenue=money(summary.mesa_revenue),
        delivery_orders=summary.delivery_orders,
        mesa_orders=summary.mesa_orders,
        orders=[],
    )


def _from_summaries(session: Session, start: datetime, end: datetime) -> dict:
    rows = list(
        session.exec(
            select(DailySummary)
            .where(DailySummary.date >= start, DailySummary.date < end)
            .order_by(DailySummary.date.desc())
        ).all()
    )
    revenue = money_sum(s.total_revenue for s in rows)
    count = sum(s.total_orders for s in rows)
    return dict(
        closed=False,
        total_revenue=revenue,
        orders_count=count,
        average_ticket=average(revenue, count),
        delivery_revenue=money_sum(s.delivery_revenue for s in rows),
        mesa_revenue=money_sum(s.mesa_revenue for s in rows),
        delivery_orders=sum(s.delivery_orders for s in rows),
        mesa_orders=sum(s.mesa_orders for s in rows),
        orders=[],
    )


def cashier_report(session: Session, period: str = "daily", now: Optional[datetime] = None) -> CashierReportRead:
    if period not in PERIODS:
        raise ValidationError(f"Período inválido: {period}")
    moment = now or datetime.now()
    start, end, label = period_window(period, moment)

    if period == "daily":
        summary = get_summary(session, start)
        data = _from_summary(summary) if summary else _daily_live(session, start, end)
    else:
        data = _from_summaries(session, start, end)

    return CashierReportRead(period=period, label=label, start=start, end=end, **data)


def _count(session: Session, *where) -> int:
    return session.exec(select(func.count()).select_from(Order).where(*where)).one()


def dashboard_stats(session: Session, now: Optional[datetime] = None) -> DashboardRead:
    start, end = day_window(now or datetime.now())
    in_today = (Order.created_at >= start, Order.created_at < end)

    revenue = session.exec(
        select(func.sum(Order.total)).where(*in_today, Order.status != OrderStatus.CANCELADO)
    ).one()

    return DashboardRead(
        today_orders=_count(session, *in_today),
        today_revenue=money(revenue),
        pending_orders=_count(
            session, *in_today, Order.status.in_((OrderStatus.PENDENTE, OrderStatus.EM_PREPARO))
        ),
        completed_orders=_count(session, *in_today, Order.status == OrderStatus.ENTREGUE),
        shift_closed=get_summary(session, start) is not None,
    )
