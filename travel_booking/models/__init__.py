"""Models module exporting all database models."""

from .admin import Admin
from .agent import Agent
from .booking import Booking, BookingStatus, PaymentStatus
from .package import Package, PackageStatus
from .traveler import Traveler

__all__ = [
    # Identity entities
    "Admin",
    "Traveler",
    "Agent",

    # Catalog entity
    "Package",
    "PackageStatus",

    # Booking entity
    "Booking",
    "BookingStatus",
    "PaymentStatus",
]
