"""
Health check endpoint for the mock server itself.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from mockserver import __version__
from mockserver.api.dependencies import get_config_store
from mockserver.routing.store import ConfigStore

router = APIRouter(tags=["health"])


@router.get("/mockserver/health", summary="Mock server health check")
async def health(store: ConfigStore = Depends(get_config_store)) -> Dict[str, Any]:
    """Report liveness and the size of the active configuration."""
    snapshot = store.snapshot()
    return {
        "status": "healthy",
        "version": __version__,
        "endpoints": len(snapshot.rule_set),
        "config_version": snapshot.version,
        "timestamp": time.time()
    }
