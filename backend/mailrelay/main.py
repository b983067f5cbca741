# mailrelay/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from mailrelay.core.mailer import Mailer, get_mailer
from mailrelay.core.settings import ConfigError, Settings, load_settings
from mailrelay.routers.contact import router as contact_router
from mailrelay.routers.health import router as health_router

log = logging.getLogger("uvicorn.error")


def create_app(settings: Settings, mailer: Optional[Mailer] = None) -> FastAPI:
    # One pooled client per process, only when we build the mailer ourselves
    client = None
    if mailer is None:
        client = httpx.AsyncClient(timeout=settings.mailgun_timeout)
        mailer = get_mailer(settings, client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()

    app = FastAPI(title="mailrelay", lifespan=lifespan)
    app.state.settings = settings
    app.state.mailer = mailer

    app.include_router(contact_router)
    app.include_router(health_router)
    return app


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    try:
        settings = load_settings()
        app = create_app(settings)
    except ConfigError as exc:
        raise SystemExit(f"mailrelay: {exc}")

    _configure_logging(settings.log_level)
    log.setLevel(settings.log_level.upper())
    log.info(
        f"[main] Will be sending mail via domain {settings.mailgun_domain}, "
        f"to address {settings.mailgun_to_address}, "
        f"with API key starting with {settings.mailgun_api_key[:6]}, "
        f"and redirecting to {settings.redirect_url} after sending mail"
    )
    log.info(f"[main] Binding to {settings.bind_address}:{settings.port}")

    uvicorn.run(
        app,
        host=settings.bind_address,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
