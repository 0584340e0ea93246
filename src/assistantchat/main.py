# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the main unit so this responsibility stays isolated, testable, and easy to evolve.

Main application entry point for the AssistantChat API server.
Includes configuration loading, error handling, and router registration.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from assistantchat.core.config import CONFIG_PATH_ENV, AppConfig, load_app_config
from assistantchat.services.exceptions import ServiceError
from assistantchat.api.v1.chat import create_chat_router
from assistantchat.api.v1.debug import router as debug_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create the FastAPI app.

    The config is loaded here when not passed in, so a missing credential
    stops the server before it binds a port. Uvicorn's reload mode requires an
    import string; using an app factory keeps route registration consistent
    across reload subprocesses.
    """
    if config is None:
        config = load_app_config()

    app = FastAPI(title="AssistantChat")
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/static", StaticFiles(directory=config.static_dir), name="static")

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(create_chat_router(config))
    if config.debug:
        api_v1_router.include_router(debug_router)
    api_v1_router.add_api_route(
        "/health", endpoint=lambda: {"status": "ok"}, methods=["GET"]
    )
    app.include_router(api_v1_router)

    # --------------- global exception handler ---------------
    @app.exception_handler(ServiceError)
    async def _service_error_handler(
        _request: Request, exc: ServiceError
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    logger.info(
        "AssistantChat ready: model=%s base_url=%s locale=%s",
        config.model,
        config.base_url,
        config.locale,
    )
    return app


def build_arg_parser() -> argparse.ArgumentParser:
    """Build Arg Parser."""
    parser = argparse.ArgumentParser(
        prog="assistantchat",
        description="Run the AssistantChat FastAPI server",
    )
    parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload (development only)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level for the server (default: info)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON config file (overrides ASSISTANTCHAT_CONFIG)",
    )
    parser.add_argument(
        "--llm-dump",
        action="store_true",
        help="Dump raw upstream request/response data to a file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Expose the upstream exchange log at /api/v1/debug/llm_logs",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entrypoint to run the server via a normal Python invocation.

    Examples:
      python -m assistantchat.main --help
      python -m assistantchat.main --host 0.0.0.0 --port 8000 --reload
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.config:
        os.environ[CONFIG_PATH_ENV] = args.config
    if args.llm_dump:
        os.environ["ASSISTANTCHAT_LLM_DUMP"] = "1"
    if args.debug:
        os.environ["ASSISTANTCHAT_DEBUG"] = "1"

    # Fail before uvicorn starts when the credential is missing
    try:
        load_app_config()
    except ServiceError as exc:
        parser.exit(2, f"assistantchat: {exc.detail}\n")

    # Import uvicorn lazily so that importing this module doesn't require it for tests/tools
    import uvicorn  # type: ignore

    uvicorn.run(
        "assistantchat.main:create_app",
        host=args.host,
        port=args.port,
        reload=bool(args.reload),
        log_level=args.log_level,
        factory=True,
    )


if __name__ == "__main__":
    main()
