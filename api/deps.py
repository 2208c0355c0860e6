"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from api.config import Settings, get_settings
from api.services.scan_service import ScanService
from worker.store.repository import ScanRepository, get_repository
from worker.tasks.scan import ScanOrchestrator

__all__ = ["SettingsDep", "RepositoryDep", "OrchestratorDep", "ScanServiceDep"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_scan_repository(settings: SettingsDep) -> ScanRepository:
    """Get the configured scan record repository."""
    return get_repository(settings)


RepositoryDep = Annotated[ScanRepository, Depends(get_scan_repository)]


def get_orchestrator(repository: RepositoryDep, settings: SettingsDep) -> ScanOrchestrator:
    """Build an orchestrator over the shared repository."""
    return ScanOrchestrator(repository, settings=settings)


OrchestratorDep = Annotated[ScanOrchestrator, Depends(get_orchestrator)]


def get_scan_service(orchestrator: OrchestratorDep, settings: SettingsDep) -> ScanService:
    return ScanService(orchestrator, settings)


ScanServiceDep = Annotated[ScanService, Depends(get_scan_service)]
