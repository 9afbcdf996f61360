from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import os
import sys
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
import httpx

# Load environment variables from .env file
load_dotenv()

# Add the app directory to Python path (needed for serverless)
app_dir = Path(__file__).parent
if str(app_dir) not in sys.path:
    sys.path.insert(0, str(app_dir))

from config import Settings, settings as default_settings
from services.car_finder import CarFinder
from services.fioletowe import FioletoweService
from services.model_dictionary import ModelDictionary
from services.warm_cache import WarmCache, ZoneCache

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Detect if running serverless (Netlify/Vercel/Lambda)
IS_SERVERLESS = (
    os.getenv("NETLIFY", False)
    or os.getenv("VERCEL", False)
    or os.getenv("AWS_LAMBDA_FUNCTION_NAME", False)
)
logger.info(f"Running in {'serverless' if IS_SERVERLESS else 'server'} mode")

# Import routers with error handling for serverless
routers = []

try:
    from api.cars import router as cars_router
    routers.append(("cars", cars_router, "/api", ["Cars"]))
except Exception as e:
    logger.warning(f"Failed to load cars router: {e}")

try:
    from api.areas import router as areas_router
    routers.append(("areas", areas_router, "/api", ["Areas"]))
except Exception as e:
    logger.warning(f"Failed to load areas router: {e}")

try:
    from api.debug import router as debug_router
    routers.append(("debug", debug_router, "/api/debug", ["Debug"]))
except Exception as e:
    logger.warning(f"Failed to load debug router: {e}")

routers_loaded = [name for name, _, _, _ in routers]
logger.info(f"Routers loaded: {routers_loaded}")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the app together with its warm-instance state.
    One FioletoweService, one ZoneCache and one model cache per app;
    a new app (or a cold start) starts with empty caches.
    """
    cfg = settings or default_settings

    app = FastAPI(
        title="Traficar Map Proxy",
        description="Available Traficar cars and zone overlays from fioletowe.live, reshaped for the map frontend",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def no_store(request: Request, call_next):
        response = await call_next(request)
        response.headers["cache-control"] = "no-store"
        response.headers["access-control-allow-origin"] = "*"
        return response

    fioletowe = FioletoweService(cfg, transport=transport)
    zone_cache = ZoneCache(cfg.zone_ttl_seconds)
    model_dictionary = ModelDictionary(fioletowe, WarmCache(cfg.models_ttl_seconds))

    app.state.settings = cfg
    app.state.fioletowe = fioletowe
    app.state.zone_cache = zone_cache
    app.state.car_finder = CarFinder(fioletowe, zone_cache, model_dictionary, cfg)

    for _, router, prefix, tags in routers:
        app.include_router(router, prefix=prefix, tags=tags)

    @app.get("/")
    async def root():
        return {
            "service": "Traficar Map Proxy",
            "status": "online",
            "upstream": cfg.fioletowe_origin,
            "routers_loaded": routers_loaded,
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "routers": len(routers_loaded)}

    return app


app = create_app()
