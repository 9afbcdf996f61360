import argparse
import asyncio
import os
import sys

# Add app directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "app"))

from config import settings
from services.car_finder import CarFinder
from services.cities import CITIES, resolve_city
from services.fioletowe import FioletoweService
from services.model_dictionary import ModelDictionary
from services.warm_cache import WarmCache, ZoneCache


async def discover(city_keys):
    fioletowe = FioletoweService(settings)
    finder = CarFinder(
        fioletowe,
        ZoneCache(settings.zone_ttl_seconds),
        ModelDictionary(fioletowe, WarmCache(settings.models_ttl_seconds)),
        settings,
    )

    print(f"🔎 Probing zones {settings.probe_first_zone}..{settings.probe_last_zone} on {settings.fioletowe_origin}")
    for key in city_keys:
        city = resolve_city(key, settings.default_city)
        records, zones = await finder.discover(city)
        cars = sum(len(records[z]) for z in zones)
        print(f"\n🚗 {city.name} ({city.key})")
        print(f"   Zones with cars: {len(zones)} ({cars} records)")
        print(f"   zones={','.join(str(z) for z in zones)}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Find the zone ids that hold cars for each city")
    parser.add_argument("cities", nargs="*", default=sorted(CITIES), help="City keys (default: all)")
    args = parser.parse_args(argv)
    asyncio.run(discover(args.cities))


if __name__ == "__main__":
    main()
