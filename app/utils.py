# app/utils.py
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple

CENT = Decimal("0.01")

PERIODS = ("daily", "monthly", "quarterly", "yearly")

_MESES = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


def money(value) -> Decimal:
    """Normaliza um valor monetário para Decimal com 2 casas."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable) -> Decimal:
    return money(sum((money(v) for v in values), Decimal("0")))


def average(total: Decimal, count: int) -> Decimal:
    if count <= 0:
        return money(0)
    return money(total / count)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(now: datetime) -> Tuple[datetime, datetime]:
    """Janela [início do dia, início do dia seguinte) no horário local."""
    start = start_of_day(now)
    return start, start + timedelta(days=1)


def _add_months(moment: datetime, months: int) -> datetime:
    idx = moment.month - 1 + months
    return moment.replace(year=moment.year + idx // 12, month=idx % 12 + 1)


def period_window(period: str, now: datetime) -> Tuple[datetime, datetime, str]:
    """
    Retorna (início, fim exclusivo, rótulo) do período do caixa.
    Períodos: daily, monthly, quarterly, yearly.
    """
    day = start_of_day(now)
    if period == "daily":
        start = day
        end = start + timedelta(days=1)
        label = f"{now.day:02d} de {_MESES[now.month - 1]} de {now.year}"
    elif period == "monthly":
        start = day.replace(day=1)
        end = _add_months(start, 1)
        label = f"{_MESES[now.month - 1]} de {now.year}"
    elif period == "quarterly":
        quarter = (now.month - 1) // 3 + 1
        start = day.replace(day=1, month=(quarter - 1) * 3 + 1)
        end = _add_months(start, 3)
        label = f"{quarter}º Trimestre de {now.year}"
    elif period == "yearly":
        start = day.replace(day=1, month=1)
        end = start.replace(year=start.year + 1)
        label = str(now.year)
    else:
        raise ValueError(f"período desconhecido: {period}")
    return start, end, label
