from sqlmodel import select

from app import seed
from app.auth import authenticate
from app.models import Dish, Role, User


def test_seed_is_idempotent(session):
    seed.run(session)
    seed.run(session)

    assert len(session.exec(select(User)).all()) == 2
    assert len(session.exec(select(Dish)).all()) == len(seed.PRATOS)


def test_seeded_admin_can_log_in(session):
    seed.run(session)
    email, _, _, senha = seed.USUARIOS[0]
    ctx = authenticate(session, email, senha)
    assert ctx.role == Role.ADMIN
