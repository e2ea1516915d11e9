from __future__ import annotations

import asyncio
import copy
import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.settings import app_settings
from server.api.dashboard import router as dashboard_router
from server.api.weather import (
    finish_search,
    get_aggregator,
    get_resolver,
    get_session,
    router as weather_router,
)
from server.session import DashboardSession


logger = logging.getLogger(__name__)

logging_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": app_settings.log_level,
            "formatter": "default",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": app_settings.log_level,
    },
}


async def _startup_search(session: DashboardSession, token: int, city: str):
    state = await finish_search(
        session, token, city, get_resolver(), get_aggregator()
    )
    logger.info(
        "Startup search for %r finished with status %s",
        city,
        state.status.value,
    )


@asynccontextmanager
async def search_default_city(app: FastAPI):
    # requests are served while the first search runs in the background
    city = app_settings.default_city
    session = get_session()
    token = session.begin(city)
    task = None
    if token is not None:
        task = asyncio.create_task(_startup_search(session, token, city))
    app.state.startup_search = task
    try:
        yield
    finally:
        if task is not None and not task.done():
            logger.info("Waiting for startup search for %r", city)
            await task


class AppBuilder:
    def __init__(self):
        self._api_prefix = "/api"
        self._log_to_file = False
        self._log_file_path = None
        self._file_log_level = None
        self._search_on_startup = False

    def set_api_prefix(self, prefix: str) -> AppBuilder:
        self._api_prefix = prefix
        return self

    def enable_file_logging(self, filename: str, log_level: str) -> AppBuilder:
        self._log_to_file = True
        self._log_file_path = filename
        self._file_log_level = log_level
        return self

    def enable_startup_search(self) -> AppBuilder:
        self._search_on_startup = True
        return self

    def _configure_file_logging(self):
        config = copy.deepcopy(logging_config)
        config['handlers']['file'] = {
            "class": "logging.FileHandler",
            "level": self._file_log_level,
            "filename": self._log_file_path,
            "formatter": "default",
        }
        config['root']['handlers'].append('file')
        logging.config.dictConfig(config)

    def build(self) -> FastAPI:
        if self._log_to_file:
            self._configure_file_logging()
        lifespan = search_default_city if self._search_on_startup else None
        app = FastAPI(title="Weather Forecast", lifespan=lifespan)
        app.state.api_prefix = self._api_prefix
        app.include_router(
            weather_router, prefix=self._api_prefix, tags=['WeatherForecast']
        )
        app.include_router(dashboard_router, tags=['Dashboard'])
        return app


def create_app() -> FastAPI:
    logging.config.dictConfig(logging_config)
    builder = AppBuilder().set_api_prefix(app_settings.api_prefix)
    if app_settings.enable_file_logging:
        builder.enable_file_logging(
            filename=app_settings.log_file_path,
            log_level=app_settings.log_level,
        )
    if app_settings.search_on_startup:
        builder.enable_startup_search()
    app = builder.build()
    return app
