"""
Hot-edit admin endpoints.

Read the active configuration document and replace it as a whole. A
replacement is validated and compiled in full before it is published, so a
rejected edit leaves the server on its last good configuration.
"""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from mockserver.api.dependencies import get_config_store, get_configuration_service
from mockserver.core.exceptions import SettingsDocumentError
from mockserver.routing.store import ConfigStore
from mockserver.services.configuration import ConfigurationService

router = APIRouter(tags=["admin"])


async def _read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SettingsDocumentError(f"Request body is not valid JSON: {e}") from e


@router.get(
    "/config",
    summary="Get configuration",
    description="Returns the active configuration document and its version"
)
async def get_configuration(store: ConfigStore = Depends(get_config_store)) -> Dict[str, Any]:
    """Return the active configuration document."""
    snapshot = store.snapshot()
    document = snapshot.rule_set.document.to_dict()
    return {
        "default_endpoint": document["default_endpoint"],
        "endpoints": document["endpoints"],
        "version": snapshot.version,
        "updated_at": snapshot.updated_at.isoformat()
    }


@router.get(
    "/endpoints",
    summary="List endpoints",
    description="Returns the declared endpoints of the active configuration"
)
async def list_endpoints(store: ConfigStore = Depends(get_config_store)) -> List[Dict[str, Any]]:
    """Return only the endpoints array."""
    return store.current().document.to_dict()["endpoints"]


@router.post(
    "/update",
    summary="Replace configuration",
    description="Replaces the whole configuration. Accepts a full document or a bare endpoint array."
)
async def update_configuration(
    request: Request,
    service: ConfigurationService = Depends(get_configuration_service)
) -> Dict[str, Any]:
    """Replace the active configuration."""
    payload = await _read_json_body(request)
    # Persisting blocks, so keep it off the event loop
    version = await run_in_threadpool(service.apply, payload)
    return {
        "status": "updated",
        "version": version,
        "endpoints": len(service.store.current())
    }


@router.put(
    "/config",
    summary="Replace configuration",
    description="Same as POST /update"
)
async def put_configuration(
    request: Request,
    service: ConfigurationService = Depends(get_configuration_service)
) -> Dict[str, Any]:
    """Replace the active configuration."""
    return await update_configuration(request, service)
