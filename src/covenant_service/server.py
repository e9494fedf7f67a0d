"""
HTTP-адаптер для `covenant-service`.

Поднимает FastAPI-приложение с эндпоинтами:
- GET /health, GET /metrics — готовность контейнера и Prometheus-метрики;
- /capabilities, /agents — реестр агентов и фабрика capability;
- POST /delegations — делегирование задачи с конвертом результата;
- /divisions, /entities, /stats, /products, /banking — in-memory домены.

Запускается командой:
uvicorn covenant_service.server:app --host 0.0.0.0 --port ${COVENANT_PORT:-8200}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from . import __version__
from .banking import Ledger
from .catalog import ProductCatalog
from .config import CovenantConfig
from .core import BaseCovenantAgent, CovenantError, InvalidInputError
from .core.envelope import utc_now
from .divisions import DivisionRegistry
from .routes import banking_router, divisions_router, products_router
from .routes.common import get_system, ok
from .system import CovenantSystem

logger = logging.getLogger(__name__)


class SpawnRequest(BaseModel):
    capability: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    args: dict[str, Any] = Field(default_factory=dict)


class DelegationRequest(BaseModel):
    task: str
    capability: str = Field(..., min_length=1)
    name: Optional[str] = None
    source: Optional[str] = None


def _agent_view(agent: BaseCovenantAgent) -> dict[str, Any]:
    return {
        **agent.health_status().model_dump(mode="json"),
        "capability": agent.capability,
        "description": agent.description,
    }


def _error_body(exc: CovenantError) -> dict[str, Any]:
    body = jsonable_encoder(exc.to_dict())
    body["timestamp"] = utc_now().isoformat()
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CovenantError)
    async def covenant_error_handler(_: Request, exc: CovenantError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed with %s: %s", exc.error_type, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=InvalidInputError.status_code,
            content=_error_body(InvalidInputError("Request validation failed", details=details)),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(CovenantError(f"{type(exc).__name__}: {exc}")),
        )


def _register_core_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health(system: CovenantSystem = Depends(get_system)) -> dict[str, Any]:
        """Простой healthcheck сервиса."""
        return {"status": "ok", "agents": len(system.registry), "version": __version__}

    @app.get("/metrics")
    async def metrics(system: CovenantSystem = Depends(get_system)) -> PlainTextResponse:
        body, content_type = system.metrics.render()
        return PlainTextResponse(body, media_type=content_type)

    @app.get("/capabilities")
    async def capabilities(system: CovenantSystem = Depends(get_system)) -> dict[str, Any]:
        return ok(system.factory.known_capabilities())

    @app.get("/agents")
    async def list_agents(system: CovenantSystem = Depends(get_system)) -> dict[str, Any]:
        return ok([_agent_view(agent) for agent in system.registry.list_all()])

    @app.get("/agents/{name}")
    async def get_agent(name: str, system: CovenantSystem = Depends(get_system)) -> dict[str, Any]:
        return ok(_agent_view(system.lookup(name)))

    @app.post("/agents", status_code=status.HTTP_201_CREATED)
    async def spawn_agent(
        payload: SpawnRequest,
        system: CovenantSystem = Depends(get_system),
    ) -> dict[str, Any]:
        """Создать и зарегистрировать экземпляр capability."""
        agent = system.spawn(payload.capability, payload.name, payload.args)
        return ok(_agent_view(agent))

    @app.delete("/agents/{name}")
    async def retire_agent(name: str, system: CovenantSystem = Depends(get_system)) -> dict[str, Any]:
        agent = system.retire(name)
        return ok({"name": agent.name, "capability": agent.capability})

    @app.post("/delegations")
    async def delegate(
        payload: DelegationRequest,
        system: CovenantSystem = Depends(get_system),
    ) -> dict[str, Any]:
        """
        Делегировать задачу.

        Ошибки обработчика не меняют HTTP-статус: они приходят внутри
        конверта, а `success` повторяет его статус.
        """
        envelope = await system.delegate(
            payload.task,
            payload.capability,
            name=payload.name,
            source=payload.source,
        )
        body = ok(envelope.model_dump(mode="json"))
        body["success"] = envelope.is_success
        return body


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    logger.info("covenant-service shutting down")
    await app.state.system.aclose()


def create_app(
    system: Optional[CovenantSystem] = None,
    config: Optional[CovenantConfig] = None,
) -> FastAPI:
    """
    Собрать FastAPI-приложение.

    Всё состояние (система агентов, дивизионы, каталог, счета) хранится
    в `app.state`, поэтому каждое приложение изолировано от других.

    Args:
        system: Готовый CovenantSystem; по умолчанию создаётся из config.
        config: Конфигурация; по умолчанию берётся из system или из ENV.
    """
    if config is None:
        config = system.config if system is not None else CovenantConfig.from_env()
    if system is None:
        system = CovenantSystem(config=config)
    if config.boot_agents:
        system.boot()

    app = FastAPI(
        title="covenant-service",
        version=__version__,
        description="Реестр агентов и делегирование задач по capability.",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.system = system
    app.state.divisions = DivisionRegistry.with_samples()
    app.state.catalog = ProductCatalog.with_samples()
    app.state.ledger = Ledger.with_samples()

    _register_exception_handlers(app)
    _register_core_routes(app)
    app.include_router(divisions_router)
    app.include_router(products_router)
    app.include_router(banking_router)
    logger.info("covenant-service app created (agents=%d)", len(system.registry))
    return app


app = create_app()
