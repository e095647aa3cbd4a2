from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from gso_library.services.errors import AuthenticationError, ServiceError


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.warning(
            'service_error',
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            message=exc.message,
        )
        headers = {'WWW-Authenticate': 'Bearer'} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content={'detail': exc.message}, headers=headers)
