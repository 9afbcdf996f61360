from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    fioletowe_origin: str = os.getenv("FIOLETOWE_ORIGIN", "https://fioletowe.live")
    user_agent: str = "Mozilla/5.0"

    # Zone fetcher
    request_timeout: float = 3.0
    zone_workers: int = 8
    request_pause: float = 0.04
    batch_budget: float = 12.0

    # Zone discovery
    probe_first_zone: int = 1
    probe_last_zone: int = 60
    discovery_batch_size: int = 20
    discovery_target: int = 25

    # Warm-instance caches
    zone_ttl_seconds: int = 600
    models_ttl_seconds: int = 600

    soft_radius_factor: float = 1.5
    default_city: str = os.getenv("DEFAULT_CITY", "krakow")

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
