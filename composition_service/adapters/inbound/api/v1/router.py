# composition_service/adapters/inbound/api/v1/router.py

from fastapi import APIRouter
# Manter em ordem alfabética
from composition_service.adapters.inbound.api.v1.endpoints import (
    composition_endpoint,
    composition_interval_endpoint,
    interval_endpoint,
    user_endpoint,
)

api_router = APIRouter()

# Autenticação e perfil
api_router.include_router(user_endpoint.router)

# Catálogo
api_router.include_router(interval_endpoint.router)

# Fluxo de composições
api_router.include_router(composition_endpoint.router)
api_router.include_router(composition_interval_endpoint.router)
