from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv(override=False)

GEMINI_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash-latest:generateContent"
)


class Settings(BaseModel):
    # Credentials
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_endpoint: str = os.getenv("GEMINI_ENDPOINT", GEMINI_ENDPOINT)
    google_places_api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")
    tourguide_api_key: str = os.getenv("TOURGUIDE_API_KEY", "")

    # Search
    search_debounce_s: float = float(os.getenv("SEARCH_DEBOUNCE_S", "0.3"))
    max_poi_count: int = int(os.getenv("MAX_POI_COUNT", "10"))
    viewport_tolerance: float = float(os.getenv("VIEWPORT_TOLERANCE", "0.0001"))
    places_language_code: str = os.getenv("PLACES_LANGUAGE_CODE", "en")

    # Default region (Shibuya station)
    default_center_lat: float = float(os.getenv("DEFAULT_CENTER_LAT", "35.6585"))
    default_center_lng: float = float(os.getenv("DEFAULT_CENTER_LNG", "139.7013"))
    default_span_m: float = float(os.getenv("DEFAULT_SPAN_M", "1000"))

    # Descriptions
    describe_cooldown_s: float = float(os.getenv("DESCRIBE_COOLDOWN_S", "2.0"))
    describe_temperature: float = float(os.getenv("DESCRIBE_TEMPERATURE", "0.7"))
    describe_language: str = os.getenv("DESCRIBE_LANGUAGE", "English")
    home_country: str = os.getenv("HOME_COUNTRY", "Japan")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
