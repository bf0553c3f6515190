from composition_service.shared.middleware.error_handler_middleware import ErrorHandlerMiddleware
from composition_service.shared.middleware.logging_middleware import AsyncRequestLoggingMiddleware

__all__ = ["ErrorHandlerMiddleware", "AsyncRequestLoggingMiddleware"]
