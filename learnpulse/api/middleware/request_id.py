"""
Request ID middleware for request correlation.

- Generates or accepts X-Request-ID header
- Stores in request.state and response headers
- Sets context vars so request_id (and later learner_id) show up in logs
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from learnpulse.logging_config import get_logger, learner_id_var, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Assign a unique request ID to each request for correlation across logs.

    - Accepts X-Request-ID from client if present
    - Otherwise generates a new UUID
    - Adds X-Request-ID to response headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        request_id = incoming if incoming else str(uuid.uuid4())

        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        # Cleared per request; filled in once the credential resolves
        learner_token = learner_id_var.set(None)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": round(duration_ms, 1),
                    },
                )

            return response
        finally:
            learner_id_var.reset(learner_token)
            request_id_var.reset(token)
