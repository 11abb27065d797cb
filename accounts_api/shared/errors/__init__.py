from .base import AppError, DomainError, InfrastructureError, ServiceUnavailableError
from .http import handle_app_error, handle_http_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "ServiceUnavailableError",
    "handle_app_error",
    "handle_http_error",
    "register_error_handler",
]
