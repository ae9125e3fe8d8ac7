from __future__ import annotations

import asyncio
import contextlib
import socket
import sys
from contextlib import asynccontextmanager
from typing import Sequence

import uvicorn
from fastapi import FastAPI

from stream_exporter import __version__
from stream_exporter.api.router import build_api_router
from stream_exporter.core.config import (
    DEFAULT_METRICS_PATH,
    Settings,
    load_settings,
    normalize_metrics_path,
)
from stream_exporter.core.errors import ExporterError, ListenError
from stream_exporter.core.logger import get_logger
from stream_exporter.infrastructure.cloudflare.client import CloudflareClient
from stream_exporter.metrics.registry import MetricsRegistry
from stream_exporter.services.poller import StreamPoller
from stream_exporter.startup import initialize_application

logger = get_logger("exporter.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("http_server_starting", extra={"metrics_path": app.state.metrics_path})
    try:
        yield
    finally:
        logger.info("http_server_stopping")


def create_app(
    registry: MetricsRegistry, metrics_path: str = DEFAULT_METRICS_PATH
) -> FastAPI:
    app = FastAPI(
        title="Cloudflare Stream Exporter",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.registry = registry
    app.state.metrics_path = normalize_metrics_path(metrics_path)
    app.include_router(build_api_router(app.state.metrics_path))
    return app


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind the listen socket up front so a taken port fails before polling."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ListenError(str(e), details={"host": host, "port": port}) from e
    return sock


async def _run(cfg: Settings) -> None:
    registry = MetricsRegistry(include_process_metrics=cfg.include_process_metrics)
    client = CloudflareClient(
        cfg.require_api_token(),
        api_base_url=cfg.cf_api_base_url,
        graphql_endpoint=cfg.cf_graphql_endpoint,
        timeout=cfg.http_timeout_seconds,
    )
    poller = StreamPoller(
        client,
        registry,
        include_accounts=cfg.included_account_ids,
        interval_seconds=cfg.poll_interval_seconds,
        window_minutes=cfg.analytics_window_minutes,
    )
    app = create_app(registry, cfg.metrics_path)
    app.state.poller = poller

    host, port = cfg.listen_address
    sock = bind_listener(host, port)
    server = uvicorn.Server(uvicorn.Config(app, log_config=None, access_log=False))
    logger.info(
        "beginning_to_serve",
        extra={"listen": cfg.listen, "metrics_path": app.state.metrics_path},
    )

    server_task = asyncio.create_task(server.serve(sockets=[sock]), name="http")
    poller_task = asyncio.create_task(poller.run_forever(), name="poller")
    try:
        done, _ = await asyncio.wait(
            {server_task, poller_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if poller_task in done and poller_task.exception() is not None:
            server.should_exit = True
            await server_task
            poller_task.result()
        await server_task
    finally:
        if not poller_task.done():
            poller_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller_task
        client.close()
        sock.close()


def main(argv: Sequence[str] | None = None) -> None:
    try:
        cfg = load_settings(sys.argv[1:] if argv is None else argv)
        initialize_application(cfg)
        asyncio.run(_run(cfg))
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt_shutdown")
    except ExporterError as e:
        logger.critical("fatal_error", extra=e.as_log_extra())
        raise SystemExit(1) from e
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error_main")
        raise SystemExit(1) from e
