"""FastAPI application and uvicorn runner for the dev server.

Module requests are answered first; every other path falls back to the demo
directory's static files, then to a plain 404.
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from polyrepo.server.config import DevServerConfig
from polyrepo.server.module_server import ModuleServer

logger = logging.getLogger(__name__)


def create_app(config: DevServerConfig, module_server: ModuleServer) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/_m/{module_path:path}")
    def serve_module(module_path: str, request: Request) -> Response:
        result = module_server.handle(module_path, request.headers.get("if-none-match"))
        return Response(content=result.body, status_code=result.status, headers=result.headers)

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    if config.root.is_dir():
        app.mount("/", StaticFiles(directory=config.root, html=True), name="static")
    else:
        logger.warning("Demo directory %s does not exist; serving modules only", config.root)

    return app


async def serve(app: FastAPI, config: DevServerConfig) -> None:
    server = uvicorn.Server(
        uvicorn.Config(app, host=config.host, port=config.port, log_level="warning")
    )
    await server.serve()
