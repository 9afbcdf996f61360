"""
Request-scoped access to the services the app factory built.
Handlers never touch module globals for upstream clients or caches.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from typing import List, Optional

from config import Settings
from models.vehicle import ErrorResponse
from services.car_finder import CarFinder
from services.fioletowe import FioletoweService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fioletowe(request: Request) -> FioletoweService:
    return request.app.state.fioletowe


def get_car_finder(request: Request) -> CarFinder:
    return request.app.state.car_finder


def error_response(
    status_code: int,
    error: str,
    detail: Optional[str] = None,
    tried: Optional[List[str]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, tried=tried)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
