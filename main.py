from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import ValidationError

from agent_rpc.agents import AgentCatalog, default_catalog
from agent_rpc.config import Settings, get_settings
from agent_rpc.errors import describe_validation_error
from agent_rpc.logging_config import setup_logging
from agent_rpc.models import JSONRPCRequest
from agent_rpc.providers import CompletionProvider, select_provider
from agent_rpc.rpc import Dispatcher


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[CompletionProvider] = None,
    catalog: Optional[AgentCatalog] = None,
) -> FastAPI:
    """Build the JSON-RPC app. ``provider`` overrides credential-based selection (tests)."""
    settings = settings or get_settings()
    catalog = catalog or default_catalog()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(timeout=settings.outbound_timeout)
        try:
            # raises ConfigurationError with no credentials; the server does not start
            active = provider or select_provider(settings, client)
            app.state.http_client = client
            app.state.dispatcher = Dispatcher(catalog, active)
            logger.info("Agent JSON-RPC server ready on http://{}:{}", settings.host, settings.port)
            logger.info("Available agents: {}", len(catalog))
            logger.info("Using {} for agent responses", active.name)
            logger.info("Supported JSON-RPC methods: list_agents, process_text")
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Agent JSON-RPC Server", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/")
    async def jsonrpc(req: Request):
        try:
            body = await req.json()
        except ValueError as e:
            # JSONDecodeError or UnicodeDecodeError
            raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}")
        try:
            rpc = JSONRPCRequest.model_validate(body)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=f"Invalid JSON-RPC envelope: {describe_validation_error(e)}")
        resp = await req.app.state.dispatcher.handle_jsonrpc(rpc)
        return resp.to_wire()

    @app.get("/health")
    async def health(req: Request):
        dispatcher = req.app.state.dispatcher
        return {"status": "ok", "provider": dispatcher.provider.name, "agents": len(dispatcher.catalog)}

    return app


def run():
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
