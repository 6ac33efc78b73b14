# src/services/errors.py
# Таксономия ошибок сервисного слоя. HTTP-статус и машинный code живут рядом,
# чтобы main.py отдавал их одним обработчиком.

from __future__ import annotations

from typing import Dict, Optional


class ServiceError(Exception):
    status_code = 500
    code = "error"
    message = "Internal error"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None):
        if code:
            self.code = code
        if message:
            self.message = message
        super().__init__(self.code)

    def to_detail(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(ServiceError):
    """Не заполнено/пустое обязательное поле."""
    status_code = 400
    code = "validation_error"
    message = "Invalid request"


class Unauthorized(ServiceError):
    status_code = 401
    code = "not_authenticated"
    message = "Not authenticated"


class Forbidden(ServiceError):
    """Пользователь аутентифицирован, но не имеет прав на группу/роль."""
    status_code = 403
    code = "forbidden"
    message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class TransactionFailure(ServiceError):
    """Стор упал посреди последовательности; транзакция уже откатана."""
    status_code = 500
    code = "transaction_failed"
    message = "Operation failed"
