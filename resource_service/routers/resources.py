from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from common.security import PrincipalDependency
from resource_service import routing
from resource_service.dependencies import DispatcherDependency

router = APIRouter(tags=["Resources"])


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def dispatch_resource_request(
    path: str,
    request: Request,
    principal: PrincipalDependency,
    dispatcher: DispatcherDependency,
):
    """
    Everything not matched by a FastAPI route goes through the resource router:
    /{resource}/list, /{resource}/detail/{id}, /{resource}/create, ...
    """
    resource_request = routing.Request(
        method=request.method,
        path="/" + path,
        body=await request.body(),
        principal=principal,
    )
    # Handlers are synchronous; the stores lock per resource type
    return await run_in_threadpool(dispatcher.dispatch, resource_request)
