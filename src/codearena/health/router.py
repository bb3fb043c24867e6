"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from codearena.config import get_settings
from codearena.dependencies import get_storage_dep
from codearena.storage.base import Storage

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    storage: Storage = Depends(get_storage_dep),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe: checks the storage backend chosen at startup."""
    checks: dict[str, object] = {}

    try:
        await storage.ping()
        checks["storage"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["storage"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if all_ok else "degraded",
        "backend": storage.backend_name,
        "checks": checks,
    }


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
