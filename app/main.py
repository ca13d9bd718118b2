# app/main.py
from __future__ import annotations

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlmodel import Session

from . import cashier, dishes, orders, shift
from .auth import AuthContext, current_admin, current_user
from .db import get_session, init_db
from .errors import ServiceError
from .schemas import (
    CashierReportRead,
    DailySummaryRead,
    DashboardRead,
    DishCreate,
    DishRead,
    DishUpdate,
    MeRead,
    OrderCreate,
    OrderRead,
    OrderUpdate,
    ShiftCloseResponse,
)

# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------
load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")

app = FastAPI(title="Restaurante POS", version="1.0")

# -----------------------------------------------------------------------------
# Startup
# -----------------------------------------------------------------------------
@app.on_event("startup")
def _startup() -> None:
    """Cria as tabelas no banco configurado."""
    init_db()

# -----------------------------------------------------------------------------
# Erros: sempre uma resposta plana {"detail": "..."}
# -----------------------------------------------------------------------------
@app.exception_handler(ServiceError)
async def _service_error(_request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.message}, headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def _request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Dados inválidos.")
    return JSONResponse(status_code=400, content={"detail": f"{where}: {msg}" if where else msg})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("erro inesperado em %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Erro interno."})

# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/me", response_model=MeRead)
def me(ctx: AuthContext = Depends(current_user)) -> MeRead:
    return MeRead(user_id=ctx.user_id, name=ctx.name, role=ctx.role)

# ----- Pratos -----
@app.get("/api/dishes", response_model=List[DishRead])
def list_dishes(available: bool = False, session: Session = Depends(get_session)):
    return [DishRead.model_validate(d) for d in dishes.list_dishes(session, available_only=available)]


@app.get("/api/dishes/{dish_id}", response_model=DishRead)
def get_dish(dish_id: int, session: Session = Depends(get_session)):
    return DishRead.model_validate(dishes.get_dish(session, dish_id))


@app.post("/api/dishes", response_model=DishRead, status_code=201)
def create_dish(
    payload: DishCreate,
    ctx: AuthContext = Depends(current_admin),
    session: Session = Depends(get_session),
):
    return DishRead.model_validate(dishes.create_dish(session, ctx, payload))


@app.patch("/api/dishes/{dish_id}", response_model=DishRead)
def update_dish(
    dish_id: int,
    payload: DishUpdate,
    ctx: AuthContext = Depends(current_admin),
    session: Session = Depends(get_session),
):
    return DishRead.model_validate(dishes.update_dish(session, ctx, dish_id, payload))


@app.delete("/api/dishes/{dish_id}")
def delete_dish(
    dish_id: int,
    ctx: AuthContext = Depends(current_admin),
    session: Session = Depends(get_session),
) -> dict:
    dishes.delete_dish(session, ctx, dish_id)
    return {"success": True}

# ----- Pedidos -----
@app.get("/api/orders", response_model=List[OrderRead])
def list_orders(
    status: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    _ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return [OrderRead.model_validate(o) for o in orders.list_orders(session, status=status, limit=limit)]


@app.post("/api/orders", response_model=OrderRead, status_code=201)
def create_order(
    payload: OrderCreate,
    ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(orders.create_order(session, ctx, payload))


@app.get("/api/orders/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    _ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(orders.get_order(session, order_id))


@app.patch("/api/orders/{order_id}", response_model=OrderRead)
def update_order(
    order_id: int,
    payload: OrderUpdate,
    ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(orders.update_order(session, ctx, order_id, payload))


@app.post("/api/orders/{order_id}/close", response_model=OrderRead)
def close_order(
    order_id: int,
    ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(orders.close_order(session, ctx, order_id))

# ----- Caixa -----
@app.post("/api/shift/close", response_model=ShiftCloseResponse)
def close_shift(
    ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    summary, deleted = shift.close_shift(session, ctx)
    return ShiftCloseResponse(summary=DailySummaryRead.model_validate(summary), deleted_orders=deleted)


@app.get("/api/cashier", response_model=CashierReportRead)
def cashier_report(
    period: str = "daily",
    _ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return cashier.cashier_report(session, period)


@app.get("/api/dashboard", response_model=DashboardRead)
def dashboard(
    _ctx: AuthContext = Depends(current_user),
    session: Session = Depends(get_session),
):
    return cashier.dashboard_stats(session)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
