from __future__ import annotations

import asyncio
import os
from pathlib import Path
from dotenv import load_dotenv

from tourguide.core.config import Settings
from tourguide.core.credentials import load_gemini_api_key
from tourguide.core.describe import PlaceDescriber
from tourguide.core.logging import configure_logging
from tourguide.core.search import SearchCoordinator
from tourguide.providers.base import Coordinate, PlacesSupplier, Viewport
from tourguide.providers.gemini import GeminiConfig, GeminiTextClient
from tourguide.providers.google_places import GooglePlacesConfig, GooglePlacesProvider


async def tour(places: PlacesSupplier, gemini, cfg: Settings) -> None:
    """Search around the default center, print the ranking and describe the nearest place."""
    coordinator = SearchCoordinator(places, debounce_s=cfg.search_debounce_s, max_results=cfg.max_poi_count)
    describer = PlaceDescriber(gemini, language=cfg.describe_language, home_country=cfg.home_country)
    try:
        center = Coordinate(cfg.default_center_lat, cfg.default_center_lng)
        coordinator.request_search(Viewport.from_meters(center, cfg.default_span_m, cfg.default_span_m))
        await coordinator.wait_settled()

        snap = coordinator.snapshot
        if snap.error is not None:
            print(f"Search failed: {snap.error}")
            return
        for r in snap.results:
            print(f"{r.rating:.1f}  {r.distance_m:7.0f} m  {r.place.name}")
        if not snap.results:
            print("No places nearby.")
            return

        describer.describe(snap.results[0].place)
        await describer.wait_settled()
        desc = describer.snapshot
        print(desc.text if desc.error is None else f"Description failed: {desc.error}")
    finally:
        coordinator.close()
        describer.close()


async def main():
    repo_root = Path(__file__).resolve().parents[2]
    load_dotenv(repo_root / ".env", override=False)
    cfg = Settings()
    configure_logging(cfg.log_level)

    places_key = os.getenv("GOOGLE_PLACES_API_KEY", "")
    if not places_key:
        raise ValueError(
            "GOOGLE_PLACES_API_KEY is not set. "
            "Add it to the repo root .env or export it in the shell."
        )
    gemini_key = load_gemini_api_key(os.environ)

    async with GooglePlacesProvider(GooglePlacesConfig(api_key=places_key, language_code=cfg.places_language_code)) as places, \
            GeminiTextClient(GeminiConfig(api_key=gemini_key)) as gemini:
        await tour(places, gemini, cfg)

if __name__ == "__main__":
    asyncio.run(main())
