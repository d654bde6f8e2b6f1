"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calculette.config import get_settings
from calculette.database import init_db
from calculette.routers import auth, clients, margin, salary_settings

settings = get_settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info("Starting margin calculette (%s)", settings.app_env)
    await init_db()
    yield


app = FastAPI(
    title="Margin Calculette",
    description="Client commercial parameters, global salary costs and margin simulation engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(salary_settings.router)
app.include_router(clients.router)
app.include_router(margin.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
