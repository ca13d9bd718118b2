# app/seed.py
from __future__ import annotations
import os
from decimal import Decimal

from dotenv import load_dotenv
from sqlmodel import Session, select

from .auth import hash_password
from .db import DB_PATH, engine, init_db
from .models import Dish, Role, User

load_dotenv()

# ---------- Parâmetros do seed (ajuste no .env) ----------
USUARIOS = [
    ("admin@restaurante.com", "Administrador", Role.ADMIN, os.getenv("ADMIN_PASSWORD", "admin123")),
    ("garcom@restaurante.com", "Garçom", Role.GARCOM, os.getenv("GARCOM_PASSWORD", "garcom123")),
]

PRATOS = [
    ("Pizza Margherita", "Molho de tomate, mussarela e manjericão", "35.00", "Pizzas"),
    ("Hambúrguer Artesanal", "Pão, carne, queijo, alface, tomate e molho especial", "28.00", "Lanches"),
    ("Salada Caesar", "Alface, croutons, parmesão e molho caesar", "22.00", "Saladas"),
    ("Risotto de Camarão", "Arroz arbóreo, camarões e queijo parmesão", "45.00", "Pratos Principais"),
    ("Suco de Laranja", "Suco natural de laranja", "8.00", "Bebidas"),
    ("Coca-Cola", "Refrigerante 350ml", "6.00", "Bebidas"),
]


def run(session: Session) -> None:
    """Cria usuários e cardápio de exemplo; não duplica o que já existe."""
    for email, nome, role, senha in USUARIOS:
        if session.exec(select(User).where(User.email == email)).first() is None:
            session.add(User(email=email, name=nome, role=role, password_hash=hash_password(senha)))

    for nome, descricao, preco, categoria in PRATOS:
        if session.exec(select(Dish).where(Dish.name == nome)).first() is None:
            session.add(Dish(name=nome, description=descricao, price=Decimal(preco), category=categoria))

    session.commit()


if __name__ == "__main__":
    init_db()
    print(f"Usando DB em: {DB_PATH}")
    with Session(engine) as s:
        run(s)
        print("usuários:", len(s.exec(select(User)).all()))
        print("pratos  :", len(s.exec(select(Dish)).all()))
    print("Seed OK ✔")
