from fastapi import APIRouter, Depends
from typing import Dict, Any

from dapp_sso import __version__
from dapp_sso.sso.executor import UnconfiguredExecutor
from dapp_sso.sso.service import SSOService, get_sso_service

router = APIRouter()


@router.get("/healthz")
async def health_check(service: SSOService = Depends(get_sso_service)) -> Dict[str, Any]:
    """Health check with registry and session counters."""
    return {
        "status": "healthy",
        "version": __version__,
        "chain_id": service.chain_id,
        "relay_configured": not isinstance(service.executor, UnconfiguredExecutor),
        **service.stats(),
    }
