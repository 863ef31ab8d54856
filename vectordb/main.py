"""
FastAPI application serving the protocol tools over HTTP.

    GET  /health              liveness + collection binding
    GET  /tools               full tool definitions
    GET  /tools/search?q=...  keyword discovery (search_tools)
    POST /tools/{name}        invoke a tool with a JSON object body

Tool errors are returned as structured payloads, never as tracebacks;
the HTTP status reflects the error kind.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vectordb import __version__
from vectordb.config import build_store, get_config, setup_logging
from vectordb.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "InvalidArgument": 400,
    "MalformedBackupRecord": 400,
    "ProviderMismatch": 409,
    "BackendFailure": 502,
    "ConnectionError": 503,
}


def create_app(store=None) -> FastAPI:
    """
    Build the app. With no `store`, one is built from config.yaml at
    startup; tests pass a prepared store instead.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is None:
            cfg = get_config()
            setup_logging(cfg)
            app.state.store = build_store(cfg)
        else:
            app.state.store = store
        app.state.registry = ToolRegistry(app.state.store)
        logger.info(
            "vectordb %s serving collection '%s'",
            __version__, app.state.store.collection_name,
        )
        yield

    app = FastAPI(title="vectordb", version=__version__, lifespan=lifespan)

    @app.get("/health")
    async def health():
        s = app.state.store
        return {
            "status": "ok",
            "collection": s.collection_name,
            "provider": s.embedding_provider.name,
        }

    @app.get("/tools")
    async def list_tools():
        return {"tools": app.state.registry.list_tools()}

    @app.get("/tools/search")
    async def search_tools(q: str = ""):
        matches = app.state.registry.search_tools(q)
        return {"query": q, "count": len(matches), "tools": matches}

    @app.post("/tools/{name}")
    async def call_tool(name: str, request: Request):
        body = await request.body()
        try:
            arguments = await request.json() if body else {}
        except ValueError:
            payload = {
                "ok": False,
                "error": {"kind": "InvalidArgument", "message": "request body is not valid JSON"},
            }
            return JSONResponse(payload, status_code=400)
        payload = app.state.registry.call(name, arguments)
        if payload["ok"]:
            return payload
        status = STATUS_BY_KIND.get(payload["error"]["kind"], 500)
        return JSONResponse(payload, status_code=status)

    return app


app = create_app()
