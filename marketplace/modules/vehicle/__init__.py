from marketplace.modules.vehicle.factory import create_vehicle_by_type, format_vehicle
from marketplace.modules.vehicle.service import VehicleService

__all__ = ["VehicleService", "create_vehicle_by_type", "format_vehicle"]
