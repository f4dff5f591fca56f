"""Ошибки бизнес-логики. Сервисы бросают их, обработчик в main.py превращает в JSON-ответ."""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(AppError):
    status_code = 400


class InvalidInterval(BadRequest):
    """start_time >= end_time или время не в формате yyyy-MM-dd HH:mm:ss."""


class InsufficientStock(BadRequest):
    """Списание больше, чем остаток товара."""


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    """Стол уже забронирован на пересекающийся интервал."""
    status_code = 409
