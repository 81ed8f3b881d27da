from fastapi import APIRouter, Depends
from common.security import CheckPermission
from resource_service.dependencies import DispatcherDependency
from resource_service.schemas import RouteInfo
from typing import List

router = APIRouter(prefix="/routes", tags=["Endpoint Catalog"])


@router.get(
    "",
    response_model=List[RouteInfo],
    dependencies=[Depends(CheckPermission("routes:list"))],
)
async def list_routes(dispatcher: DispatcherDependency, q: str = ""):
    """
    Route table of the resource router.
    `q` filters it: "/orders/*" is a wildcard over the path,
    anything else matches path, method, name or description.
    """
    return [
        RouteInfo(
            method=route.method,
            path=route.pattern,
            permission=route.permission,
            name=route.name,
            description=route.description,
        )
        for route in dispatcher.router.search(q)
    ]
