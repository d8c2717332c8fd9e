from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.database import engine, initialize_database
from app.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa o banco de dados ao subir e libera os recursos ao encerrar."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Cria e configura a aplicação principal do FastAPI."""

    settings = get_settings()
    app = FastAPI(title="goOut API", lifespan=lifespan)

    # Autoriza requisições do cliente web.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
