# composition_service/shared/middleware/logging_middleware.py

"""
Middleware for HTTP request logging.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AsyncRequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log de requisições HTTP. Fora de produção inclui query, cliente e tempo.
    """

    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self.verbose = environment != "production"

    async def dispatch(self, request: Request, call_next):
        if self.verbose:
            query_params = dict(request.query_params)
            logger.info(
                f"Request: {request.method} {request.url.path} | "
                f"Query: {query_params if query_params else 'N/A'} | "
                f"Client: {request.client.host if request.client else 'N/A'}"
            )
        else:
            logger.info(f"Request: {request.method} {request.url.path}")

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        if self.verbose:
            logger.info(
                f"Response: {response.status_code} for {request.method} {request.url.path} | "
                f"Time: {process_time:.4f}s"
            )
        else:
            logger.info(f"Response: {response.status_code} for {request.method} {request.url.path}")

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
