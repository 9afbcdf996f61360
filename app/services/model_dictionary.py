"""
Car model dictionary
Vehicle records only carry a model id; names, drivetrain and tank/battery
capacity come from the separate /api/v1/car-models endpoint.
"""

import logging
import re
from typing import Any, Dict, Optional, Tuple

from models.vehicle import ModelInfo
from services.fioletowe import FioletoweService
from services.field_rules import (
    ELECTRIC_FLAG_RULES,
    ENGINE_TYPE_RULES,
    ID_RULES,
    MAX_FUEL_RULES,
    MODEL_ID_RULES,
    MODEL_NAME_RULES,
    FieldRule,
    pick,
    to_number,
)
from services.shapes import normalize_records
from services.warm_cache import WarmCache

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "Traficar"
ELECTRIC_TYPE = re.compile(r"electr|\bev\b|bev", re.IGNORECASE)

# In the dictionary itself the model's own id and name are top level
DICTIONARY_ID_RULES = ID_RULES + MODEL_ID_RULES
DICTIONARY_NAME_RULES = [FieldRule("name", "label"), FieldRule("displayName", "label")] + MODEL_NAME_RULES

CACHE_KEY = "car-models"


def is_electric(record: Dict[str, Any]) -> Optional[bool]:
    """True/False when the record says so, None when it is silent"""
    flag = pick(record, ELECTRIC_FLAG_RULES)
    if flag is not None:
        return flag
    engine_type = pick(record, ENGINE_TYPE_RULES)
    if engine_type:
        return bool(ELECTRIC_TYPE.search(engine_type))
    return None


def build_model_dictionary(payload: Any) -> Dict[int, ModelInfo]:
    models: Dict[int, ModelInfo] = {}
    for record in normalize_records(payload):
        model_id = to_number(pick(record, DICTIONARY_ID_RULES))
        if model_id is None:
            continue
        models[int(model_id)] = ModelInfo(
            id=int(model_id),
            name=pick(record, DICTIONARY_NAME_RULES, DEFAULT_MODEL_NAME),
            electric=bool(is_electric(record)),
            max_fuel=pick(record, MAX_FUEL_RULES),
        )
    return models


def join_model(
    record: Dict[str, Any], models: Dict[int, ModelInfo]
) -> Tuple[str, bool, Optional[float]]:
    """
    (name, electric, max_fuel) for a vehicle record.
    An unknown model id is not an error: fall back to the record's own
    model name, then to the literal default.
    """
    model_id = pick(record, MODEL_ID_RULES)
    info = models.get(int(model_id)) if model_id is not None else None

    own_electric = is_electric(record)
    own_max_fuel = pick(record, MAX_FUEL_RULES)

    if info:
        electric = info.electric if own_electric is None else own_electric
        max_fuel = info.max_fuel if info.max_fuel is not None else own_max_fuel
        return info.name, electric, max_fuel

    name = pick(record, MODEL_NAME_RULES, DEFAULT_MODEL_NAME)
    return name, bool(own_electric), own_max_fuel


class ModelDictionary:
    """Warm-instance cached view of /api/v1/car-models"""

    def __init__(self, fioletowe: FioletoweService, cache: WarmCache):
        self.fioletowe = fioletowe
        self.cache = cache

    async def load(self) -> Dict[int, ModelInfo]:
        cached = await self.cache.get(CACHE_KEY)
        if cached is not None:
            return cached

        models = build_model_dictionary(await self.fioletowe.car_models())
        if models:
            await self.cache.set(CACHE_KEY, models)
            logger.info(f"Loaded {len(models)} car models")
        else:
            # cars fall back to their raw model names
            logger.warning("Car model dictionary unavailable")
        return models
