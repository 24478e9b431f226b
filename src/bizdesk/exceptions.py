"""
═══════════════════════════════════════════════════════════════════════════════
Bizdesk — Иерархия доменных ошибок (Custom Exception Hierarchy)
═══════════════════════════════════════════════════════════════════════════════

Базовый класс ``BizdeskError``. Guard-зависимости и сервисы бросают эти
исключения сразу при первом нарушении; HTTP-маппинг кодов выполняется
в ``bizdesk.main:bizdesk_error_handler``.
"""


class BizdeskError(Exception):
    """
    Базовое исключение для всех доменных ошибок.

    Атрибуты
    ────────
        message (str):  Описание ошибки. Передаётся клиенту в JSON.
        code (str):     Строковый код. Используется для маппинга на HTTP-статус.
        details (dict): Дополнительные данные (entity, id, field и т.д.).
    """

    def __init__(
        self,
        message: str,
        code: str = "BIZDESK_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class BadRequestError(BizdeskError):
    """Некорректный ввод: 400 Bad Request."""

    def __init__(self, message: str = "Bad request", details: dict | None = None):
        super().__init__(message, code="BAD_REQUEST", details=details)


class UnauthorizedError(BizdeskError):
    """Нет/невалидные учётные данные или действие в чужой компании: 401."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(BizdeskError):
    """Пользователь аутентифицирован, но действие запрещено: 403."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, code="FORBIDDEN")


class NotFoundError(BizdeskError):
    """Сущность не найдена: 404 Not Found."""

    def __init__(self, entity: str, entity_id: str, message: str | None = None):
        super().__init__(
            message=message or f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class ConflictError(BizdeskError):
    """Конфликт с текущим состоянием (серверное поле, дубликат): 409 Conflict."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="CONFLICT", details=details)


STATUS_BY_CODE: dict[str, int] = {
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
}


__all__ = [
    "BizdeskError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "STATUS_BY_CODE",
]
