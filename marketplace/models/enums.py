import enum


class UserRole(str, enum.Enum):
    BUYER = "ROLE_BUYER"
    MERCHANT = "ROLE_MERCHANT"


class VehicleType(str, enum.Enum):
    MOTORCYCLE = "motorcycle"
    CAR = "car"
    TRUCK = "truck"
    TRAILER = "trailer"
    CART = "cart"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CarCategory(str, enum.Enum):
    SEDAN = "sedan"
    HATCHBACK = "hatchback"
    SUV = "suv"
    COUPE = "coupe"
    MINIVAN = "minivan"
    PICKUP = "pickup"
    LIMOUSINE = "limousine"

    @property
    def label(self) -> str:
        return "SUV" if self is CarCategory.SUV else self.value.capitalize()
