"""Health endpoint."""

from fastapi import APIRouter, Depends

from policytree.services.registry import DomainRegistry, get_registry

router = APIRouter(tags=["monitoring"])


@router.get("/health", summary="Health check")
def health(registry: DomainRegistry = Depends(get_registry)):
    """
    Health check for load balancers and orchestration.
    Reports the registered domains; the service holds no other state.
    """
    return {"status": "ok", "service": "PolicyTree", "domains": registry.list_domains()}
