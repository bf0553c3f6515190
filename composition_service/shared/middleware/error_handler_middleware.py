# composition_service/shared/middleware/error_handler_middleware.py

import logging

from fastapi import Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from composition_service.domain.exceptions import DomainException

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)

        # 1. Exceções do domínio
        except DomainException as e:
            if e.status_code >= 500:
                logger.error(f"[{e.internal_code}] {e.message} on {request.method} {request.url.path}")
            else:
                logger.warning(f"[{e.internal_code}] DomainException: {e.message}")
            headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "success": False,
                    "error": e.message,
                    "code": e.internal_code,
                    "details": e.details,
                },
                headers=headers,
            )

        # 2. Erros de validação (Pydantic/FastAPI)
        except RequestValidationError as e:
            logger.warning("RequestValidationError")
            return JSONResponse(
                status_code=422,
                content={
                    "success": False,
                    "error": "Invalid request data.",
                    "code": "VALIDATION_ERROR",
                    "details": e.errors(),
                },
            )

        # 3. Exceções HTTP padrão
        except HTTPException as e:
            logger.warning(f"HTTPException: {e.detail}")
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "success": False,
                    "error": str(e.detail),
                    "code": "HTTP_EXCEPTION",
                },
                headers=e.headers,
            )

        # 4. Erros inesperados: nada do armazenamento vaza para o cliente
        except Exception:
            logger.exception(f"Unexpected error on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error.",
                    "code": "INTERNAL_SERVER_ERROR",
                },
            )
