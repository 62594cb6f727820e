"""Service layer package."""

from .admin_service import AdminService
from .auth_service import AuthService
from .booking_service import BookingService
from .booking_workflow import BookingWorkflow, SubmissionResult
from .notification_service import BookingNotifier, LoggingBookingNotifier, SmtpBookingNotifier, build_notifier
from .package_service import PackageService
from .traveler_service import TravelerResolution, TravelerService

__all__ = [
    "AdminService",
    "AuthService",
    "BookingService",
    "BookingWorkflow",
    "SubmissionResult",
    "BookingNotifier",
    "LoggingBookingNotifier",
    "SmtpBookingNotifier",
    "build_notifier",
    "PackageService",
    "TravelerResolution",
    "TravelerService",
]
