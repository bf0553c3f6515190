# composition_service/adapters/inbound/api/v1/endpoints/health_endpoint.py

from fastapi import APIRouter, Depends

from composition_service.adapters.inbound.api.deps import get_session_store
from composition_service.application.ports.outbound.session_store_port import ISessionStore

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Liveness and session store status")
async def health(session_store: ISessionStore = Depends(get_session_store)):
    return {
        "status": "ok",
        "session_store": "enabled" if session_store.enabled else "disabled",
    }
