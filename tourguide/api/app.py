from __future__ import annotations

import os
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI

from .routes import router
from ..core.config import Settings, settings as default_settings
from ..core.credentials import load_gemini_api_key
from ..core.describe import PlaceDescriber
from ..core.location import LocationTracker
from ..core.logging import configure_logging, logger
from ..core.search import SearchCoordinator
from ..providers.gemini import GeminiConfig, GeminiTextClient
from ..providers.google_places import GooglePlacesConfig, GooglePlacesProvider


@dataclass
class GuideServices:
    coordinator: SearchCoordinator
    describer: PlaceDescriber
    tracker: LocationTracker

    def close(self) -> None:
        self.coordinator.close()
        self.describer.close()


def build_services(cfg: Settings, places, text_client) -> GuideServices:
    coordinator = SearchCoordinator(
        places,
        debounce_s=cfg.search_debounce_s,
        max_results=cfg.max_poi_count,
        viewport_tolerance=cfg.viewport_tolerance,
        default_span_m=cfg.default_span_m,
    )
    describer = PlaceDescriber(
        text_client,
        cooldown_s=cfg.describe_cooldown_s,
        temperature=cfg.describe_temperature,
        language=cfg.describe_language,
        home_country=cfg.home_country,
    )
    return GuideServices(coordinator=coordinator, describer=describer, tracker=LocationTracker(coordinator))


def _lifespan(cfg: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(cfg.log_level)
        if not cfg.google_places_api_key:
            raise ValueError("GOOGLE_PLACES_API_KEY is not set.")
        async with AsyncExitStack() as stack:
            places = await stack.enter_async_context(
                GooglePlacesProvider(
                    GooglePlacesConfig(api_key=cfg.google_places_api_key, language_code=cfg.places_language_code)
                )
            )
            api_key = load_gemini_api_key({"GEMINI_API_KEY": cfg.gemini_api_key}, os.environ)
            text_client = await stack.enter_async_context(
                GeminiTextClient(GeminiConfig(api_key=api_key, endpoint=cfg.gemini_endpoint))
            )
            services = build_services(cfg, places, text_client)
            app.state.services = services
            logger.info("tourguide_starting", gemini_configured=api_key is not None)
            try:
                yield
            finally:
                services.close()

    return lifespan


def create_app(services: Optional[GuideServices] = None, cfg: Optional[Settings] = None) -> FastAPI:
    """Services are built from settings on startup unless injected."""
    cfg = cfg or default_settings
    app = FastAPI(
        title="TourGuide API",
        version="0.1.0",
        lifespan=None if services is not None else _lifespan(cfg),
    )
    if services is not None:
        app.state.services = services
    app.include_router(router, prefix="/v1")
    return app


app = create_app()
