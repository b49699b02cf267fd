import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from catalog.config.settings import Settings
from catalog.constants import API_VERSION
from catalog.core.dependencies import get_app_settings
from catalog.utils.project import get_project_version

router = APIRouter(tags=["Health"])


@router.get("/", summary="API information")
def api_info(request: Request, settings: Settings = Depends(get_app_settings)):
    prefix = settings.API_V1_PREFIX
    return {
        "message": settings.APP_NAME,
        "version": get_project_version(),
        "status": "OK",
        "api_versions": {
            "current": API_VERSION,
            "supported": [API_VERSION],
            "deprecated": [],
        },
        "modules": ["products"],
        "endpoints": {
            API_VERSION: {
                "products": f"{prefix}/products",
                "health": f"{prefix}/health",
            },
        },
    }


@router.get("/health", summary="Liveness check")
def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    return {
        "status": "OK",
        "version": get_project_version(),
        "api_version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "environment": settings.ENV,
    }
