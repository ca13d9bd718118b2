from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from app.auth import AuthContext, hash_password
from app.db import get_session, init_db, make_engine
from app.main import app
from app.models import Dish, Order, OrderItem, OrderStatus, OrderType, Role, User

ADMIN = ("admin@restaurante.com", "admin123")
GARCOM = ("garcom@restaurante.com", "garcom123")


@pytest.fixture()
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture()
def users(session):
    admin = User(email=ADMIN[0], name="Administrador", role=Role.ADMIN, password_hash=hash_password(ADMIN[1]))
    garcom = User(email=GARCOM[0], name="Garçom", role=Role.GARCOM, password_hash=hash_password(GARCOM[1]))
    session.add(admin)
    session.add(garcom)
    session.commit()
    session.refresh(admin)
    session.refresh(garcom)
    return admin, garcom


@pytest.fixture()
def admin_ctx(users):
    admin, _ = users
    return AuthContext(user_id=admin.id, name=admin.name, role=Role.ADMIN)


@pytest.fixture()
def garcom_ctx(users):
    _, garcom = users
    return AuthContext(user_id=garcom.id, name=garcom.name, role=Role.GARCOM)


@pytest.fixture()
def menu(session):
    pizza = Dish(name="Pizza Margherita", price=Decimal("35.00"), category="Pizzas")
    coca = Dish(name="Coca-Cola", price=Decimal("6.00"), category="Bebidas")
    session.add(pizza)
    session.add(coca)
    session.commit()
    session.refresh(pizza)
    session.refresh(coca)
    return pizza, coca


@pytest.fixture()
def make_order(session, users, menu):
    """Grava um pedido direto no banco, com status/total/data controlados."""
    admin, _ = users
    pizza, _ = menu
    counter = {"n": 0}

    def _make(type_, status, total, created_at):
        counter["n"] += 1
        order = Order(
            order_number=f"ORD-T{counter['n']:05d}",
            type=type_,
            status=status,
            total=Decimal(str(total)),
            user_id=admin.id,
            created_at=created_at,
            items=[OrderItem(dish_id=pizza.id, quantity=1, price=Decimal(str(total)))],
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make


@pytest.fixture()
def client(engine, users, menu):
    def _override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()
