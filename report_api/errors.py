"""
Error types raised by route handlers.

Each error maps to one HTTP status and a stable machine-readable code that
ends up in the ``{"error": {"code", "message"}}`` envelope.
"""

from typing import Iterable


class ApiError(Exception):
    """Base class for errors answered with the error envelope."""
    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Falha ao buscar dados."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingParameterError(ApiError):
    status_code = 400
    code = "missing_parameter"

    def __init__(self, required: Iterable[str], example: str = None):
        self.required = list(required)
        message = example or "Informe ?" + "&".join(f"{k}=..." for k in self.required)
        super().__init__(message)


class InvalidParameterError(ApiError):
    status_code = 400
    code = "invalid_parameter"

    def __init__(self, name: str, expected: str = "inteiro"):
        self.name = name
        super().__init__(f"Parâmetro '{name}' inválido: esperado {expected}")


class NotFoundError(ApiError):
    status_code = 404
    code = "not_found"
    default_message = "Nenhum dado encontrado."


class RequestTimeoutError(ApiError):
    status_code = 504
    code = "timeout"
    default_message = "Tempo limite da consulta excedido."
