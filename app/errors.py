# app/errors.py
from __future__ import annotations


class ServiceError(Exception):
    """Falha de regra de negócio, convertida em resposta HTTP pelo main.py."""

    status_code = 500
    default_message = "Erro interno."
    headers: dict | None = None

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(ServiceError):
    status_code = 404
    default_message = "Registro não encontrado."


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Não autorizado."
    headers = {"WWW-Authenticate": "Basic"}


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Dados inválidos."


class InvalidTransition(ServiceError):
    status_code = 409
    default_message = "Transição de status não permitida."


class InternalError(ServiceError):
    status_code = 500
