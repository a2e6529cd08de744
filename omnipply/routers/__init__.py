"""Router modules for the Omnipply API."""

from . import (
    advertise,
    applications,
    capabilities,
    forms,
    notifications,
    organizations,
    ping,
    programs,
    reviews,
    users,
)

__all__ = [
    "advertise",
    "applications",
    "capabilities",
    "forms",
    "notifications",
    "organizations",
    "ping",
    "programs",
    "reviews",
    "users",
]
