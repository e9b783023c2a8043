"""
Dependency injection for FastAPI.
"""
from typing import Annotated, Optional
from fastapi import Depends

from concession_map.config import settings
from concession_map.infrastructure.dataset_client import (
    DatasetClient,
    get_dataset_client,
)
from concession_map.services.application.dashboard_service import DashboardService


# Singleton instance, loaded once in the application lifespan
_dashboard_service: Optional[DashboardService] = None


def get_dashboard_service() -> DashboardService:
    """
    Get or create the singleton DashboardService.

    The service holds the loaded datasets, so it lives for the whole
    process rather than per request.

    Returns:
        DashboardService instance
    """
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService(
            dataset_client=get_dataset_client(),
            centroid_method=settings.centroid_method,
        )
    return _dashboard_service


# Type aliases for cleaner route signatures
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
DatasetClientDep = Annotated[DatasetClient, Depends(get_dataset_client)]
