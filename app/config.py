# app/config.py
from typing import Literal, Tuple
from pydantic_settings import BaseSettings, SettingsConfigDict

AMADEUS_ENDPOINTS = {
    "production": "https://api.amadeus.com",
    "test": "https://test.api.amadeus.com",
}


class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"
    TZ: str = "Europe/Amsterdam"
    PORT: int = 3000

    # Amadeus
    AMADEUS_ENV: str = "test"  # or "production"
    AMADEUS_API_KEY: str = ""
    AMADEUS_API_SECRET: str = ""
    AMADEUS_PROD_API_KEY: str = ""
    AMADEUS_PROD_API_SECRET: str = ""

    # Hotel search
    HOTEL_SEARCH_RADIUS_KM: int = 50
    HOTEL_CURRENCY: str = "EUR"
    DEFAULT_CITY_CODE: str = "AMS"

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.AMADEUS_ENV == "production"

    @property
    def amadeus_base_url(self) -> str:
        return AMADEUS_ENDPOINTS["production" if self.is_production else "test"]

    @property
    def amadeus_credentials(self) -> Tuple[str, str]:
        """Client id/secret pair matching the selected endpoint."""
        if self.is_production:
            return self.AMADEUS_PROD_API_KEY, self.AMADEUS_PROD_API_SECRET
        return self.AMADEUS_API_KEY, self.AMADEUS_API_SECRET


settings = Settings()
