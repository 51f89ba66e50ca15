from __future__ import annotations

from functools import lru_cache

from src.repositories.owner_portal_repository import OwnerPortalRepository
from src.services.owner_portal_service import OwnerPortalService


@lru_cache
def get_owner_portal_repository() -> OwnerPortalRepository:
    return OwnerPortalRepository()


def get_owner_portal_service() -> OwnerPortalService:
    return OwnerPortalService(repository=get_owner_portal_repository())
