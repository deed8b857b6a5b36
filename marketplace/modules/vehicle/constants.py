from marketplace.models.enums import VehicleType

VALID_VEHICLE_TYPES = tuple(vehicle_type.value for vehicle_type in VehicleType)

MAX_BRAND_LENGTH = 100
MAX_MODEL_LENGTH = 100
MAX_COLOUR_LENGTH = 50

MIN_SEARCH_LENGTH = 2
MAX_SEARCH_LENGTH = 255

DOOR_CHOICES = (3, 4, 5)
BED_CHOICES = (1, 2)
AXLE_CHOICES = (1, 2, 3)

# Applied when a create request omits a type-specific field
DEFAULT_ENGINE_CAPACITY = "0.00"
DEFAULT_NUMBER_OF_DOORS = 4
DEFAULT_NUMBER_OF_BEDS = 1
DEFAULT_NUMBER_OF_AXLES = 1
DEFAULT_LOAD_CAPACITY = 0
DEFAULT_PERMITTED_MAXIMUM_MASS = 0

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
