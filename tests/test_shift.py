from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlmodel import Session, select

from app import shift
from app.models import DailySummary, Order, OrderItem, OrderStatus, OrderType
from app.shift import aggregate, close_shift

NOW = datetime(2026, 3, 10, 15, 0)
EARLIER = NOW - timedelta(hours=3)

MESA, DELIVERY = OrderType.MESA, OrderType.DELIVERY


def _live_ids(session):
    return {o.id for o in session.exec(select(Order)).all()}


def test_close_aggregates_settled_orders_and_purges_the_day(session, admin_ctx, make_order):
    a = make_order(MESA, OrderStatus.FECHADO, 50, EARLIER)
    b = make_order(MESA, OrderStatus.ABERTO, 30, EARLIER)
    c = make_order(DELIVERY, OrderStatus.DELIVERY, 20, EARLIER)
    ids = {a.id, b.id, c.id}

    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert summary.date == datetime(2026, 3, 10)
    assert summary.total_orders == 2
    assert summary.total_revenue == Decimal("70")
    assert summary.mesa_orders == 1
    assert summary.mesa_revenue == Decimal("50")
    assert summary.delivery_orders == 1
    assert summary.delivery_revenue == Decimal("20")
    assert summary.average_ticket == Decimal("35")
    assert summary.closed_by == admin_ctx.user_id
    assert summary.closed_at == NOW

    assert deleted == 3
    assert not _live_ids(session) & ids
    assert session.exec(select(OrderItem)).all() == []


def test_cancelled_orders_are_not_counted(session, admin_ctx, make_order):
    make_order(MESA, OrderStatus.CANCELADO, 999, EARLIER)
    make_order(MESA, OrderStatus.FECHADO, 10, EARLIER)

    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert summary.total_orders == 1
    assert summary.total_revenue == Decimal("10")
    assert deleted == 2


def test_close_without_orders_creates_zero_summary(session, admin_ctx, users):
    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert deleted == 0
    assert summary.total_orders == 0
    assert summary.total_revenue == Decimal("0")
    assert summary.average_ticket == Decimal("0")


def test_orders_from_other_days_survive(session, admin_ctx, make_order):
    yesterday = make_order(MESA, OrderStatus.FECHADO, 40, NOW - timedelta(days=1))
    tomorrow = make_order(MESA, OrderStatus.FECHADO, 40, NOW.replace(hour=0) + timedelta(days=1))
    make_order(MESA, OrderStatus.FECHADO, 15, NOW.replace(hour=0))

    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert deleted == 1
    assert summary.total_revenue == Decimal("15")
    assert _live_ids(session) == {yesterday.id, tomorrow.id}


def test_kitchen_status_orders_are_purged_uncounted(session, admin_ctx, make_order):
    served = make_order(MESA, OrderStatus.ENTREGUE, 80, EARLIER)
    cooking = make_order(MESA, OrderStatus.EM_PREPARO, 40, EARLIER)
    make_order(MESA, OrderStatus.FECHADO, 10, EARLIER)
    ids = {served.id, cooking.id}

    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert deleted == 3
    assert summary.total_orders == 1
    assert summary.total_revenue == Decimal("10")
    assert not _live_ids(session) & ids


def test_second_close_merges_instead_of_overwriting(session, admin_ctx, garcom_ctx, make_order):
    make_order(MESA, OrderStatus.FECHADO, 50, EARLIER)
    close_shift(session, admin_ctx, now=NOW)

    # nada novo: o resumo continua igual
    summary, deleted = close_shift(session, admin_ctx, now=NOW + timedelta(hours=1))
    assert deleted == 0
    assert summary.total_orders == 1
    assert summary.total_revenue == Decimal("50")

    # pedido lançado depois do primeiro fechamento entra no resumo
    make_order(DELIVERY, OrderStatus.DELIVERY, 25, NOW + timedelta(hours=2))
    summary, deleted = close_shift(session, garcom_ctx, now=NOW + timedelta(hours=3))
    assert deleted == 1
    assert summary.total_orders == 2
    assert summary.total_revenue == Decimal("75")
    assert summary.delivery_orders == 1
    assert summary.average_ticket == Decimal("37.50")
    assert summary.closed_by == garcom_ctx.user_id

    assert len(session.exec(select(DailySummary)).all()) == 1


def test_order_created_during_close_survives(session, engine, admin_ctx, users, menu, make_order, monkeypatch):
    admin, _ = users
    pizza, _ = menu
    make_order(MESA, OrderStatus.FECHADO, 10, EARLIER)
    late_ids = []

    # outro caixa lança um pedido entre a leitura e a remoção
    def aggregate_with_late_order(orders):
        with Session(engine) as other:
            late = Order(
                order_number="ORD-LATE",
                type=MESA,
                status=OrderStatus.FECHADO,
                total=Decimal("99"),
                user_id=admin.id,
                created_at=EARLIER + timedelta(minutes=1),
                items=[OrderItem(dish_id=pizza.id, quantity=1, price=Decimal("99"))],
            )
            other.add(late)
            other.commit()
            late_ids.append(late.id)
        return aggregate(orders)

    monkeypatch.setattr(shift, "aggregate", aggregate_with_late_order)
    summary, deleted = close_shift(session, admin_ctx, now=NOW)

    assert deleted == 1
    assert summary.total_orders == 1
    assert summary.total_revenue == Decimal("10")
    assert _live_ids(session) == set(late_ids)


def test_failed_close_leaves_orders_untouched(session, admin_ctx, make_order, monkeypatch):
    order = make_order(MESA, OrderStatus.FECHADO, 50, EARLIER)

    def boom(*_args, **_kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(session, "commit", boom)
    with pytest.raises(RuntimeError):
        close_shift(session, admin_ctx, now=NOW)
    monkeypatch.undo()

    assert order.id in _live_ids(session)
    assert session.exec(select(DailySummary)).all() == []


def test_aggregate_uses_only_settled_statuses(session, make_order):
    orders = [
        make_order(MESA, OrderStatus.FECHADO, "10.10", EARLIER),
        make_order(MESA, OrderStatus.ENTREGUE, 5, EARLIER),
        make_order(DELIVERY, OrderStatus.DELIVERY, "0.20", EARLIER),
    ]
    totals = aggregate(orders)
    assert totals.total_orders == 2
    assert totals.total_revenue == Decimal("10.30")
    assert totals.average_ticket == Decimal("5.15")
