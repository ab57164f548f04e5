"""
기본 마스터 데이터 — 테헤란 일대 위치 14곳 (첫 항목이 중앙 창고)과 드라이버 5명
"""

from fleet_tracker.models.location import GeoCatalog
from fleet_tracker.simulator.dispatch_engine import DriverProfile

# {id, locationName, latitude, longitude} — 외부에서 주입되는 카탈로그와 같은 형식
DEFAULT_LOCATIONS = [
    {"id": 1, "locationName": "Digikala Central Warehouse", "latitude": 35.6943, "longitude": 51.3347},
    {"id": 2, "locationName": "Iran Mall", "latitude": 35.7533, "longitude": 51.2183},
    {"id": 3, "locationName": "Sa'adat Abad Cafe", "latitude": 35.7876, "longitude": 51.3787},
    {"id": 4, "locationName": "Niavaran Residence", "latitude": 35.8166, "longitude": 51.4646},
    {"id": 5, "locationName": "Vanak Office Tower", "latitude": 35.7594, "longitude": 51.411},
    {"id": 6, "locationName": "Tehranpars Medical Clinic", "latitude": 35.7289, "longitude": 51.5273},
    {"id": 7, "locationName": "Enghelab Sq. Bookstore", "latitude": 35.7011, "longitude": 51.3912},
    {"id": 8, "locationName": "Ferdowsi Grand Hotel", "latitude": 35.6924, "longitude": 51.4208},
    {"id": 9, "locationName": "Palladium Mall", "latitude": 35.8048, "longitude": 51.4348},
    {"id": 10, "locationName": "Azadi Tower Maintenance", "latitude": 35.6997, "longitude": 51.3381},
    {"id": 11, "locationName": "amper", "latitude": 35.69919118991611, "longitude": 51.1812093456318},
    {"id": 12, "locationName": "amper", "latitude": 35.69972100617487, "longitude": 51.18195450095837},
    {"id": 13, "locationName": "ertyjk", "latitude": 35.666594425399, "longitude": 51.35883427773993},
    {"id": 14, "locationName": "sedrfgjhj", "latitude": 35.70341740273831, "longitude": 51.35889843749993},
]

DEFAULT_DRIVERS = [
    DriverProfile(id=1, name="Amir Rezvani", vehicle_type="Van"),
    DriverProfile(id=2, name="Leila Farhadi", vehicle_type="Small Truck"),
    DriverProfile(id=3, name="Babak Norouzi", vehicle_type="Service Van"),
    DriverProfile(id=4, name="Shirin Ebrahimi", vehicle_type="Sedan"),
    DriverProfile(id=5, name="Sina Mansouri", vehicle_type="Large Truck"),
]


def default_catalog() -> GeoCatalog:
    return GeoCatalog.from_records(DEFAULT_LOCATIONS)
