from fastapi import FastAPI

from .messages import router as messages_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Registra todos os routers da API na aplicação FastAPI."""

    app.include_router(messages_router)
    app.include_router(notifications_router)
