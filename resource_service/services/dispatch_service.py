import logging
from typing import Any, Dict, Iterable, Optional
from common.security import Authorizer
from resource_service.routing import Request, Router
from resource_service.services.resource_service import ResourceHandlerSet
from resource_service.store import ResourceStore

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    route -> permission check -> handler.
    The permission check runs before the body is read, so a denied request
    never touches the store.
    """

    def __init__(
        self,
        router: Router,
        authorizer: Authorizer,
        handler_sets: Dict[str, ResourceHandlerSet],
    ):
        self.router = router
        self.authorizer = authorizer
        self.handler_sets = handler_sets

    def dispatch(self, request: Request) -> Any:
        match = self.router.resolve(request.method, request.path)
        route = match.route

        self.authorizer.require(request.principal, route.permission)

        logger.debug("%s %s -> %s", request.method, request.path, route.name)
        return route.handler(request.bind(match.params))

    def handler_set(self, resource_type: str) -> ResourceHandlerSet:
        return self.handler_sets[resource_type]


def build_dispatcher(
    resource_types: Iterable[str],
    authorizer: Optional[Authorizer] = None,
) -> Dispatcher:
    """
    Startup wiring: one store and one handler set per resource type,
    all routes registered on a single router which is then frozen.
    """
    router = Router()
    handler_sets: Dict[str, ResourceHandlerSet] = {}

    for resource_type in resource_types:
        if resource_type in handler_sets:
            raise ValueError(f"Resource type '{resource_type}' configured twice")
        handler_set = ResourceHandlerSet(ResourceStore(resource_type))
        handler_set.register_routes(router)
        handler_sets[resource_type] = handler_set

    router.freeze()
    logger.info("Route table ready: %d routes for %d resource types", len(router.routes), len(handler_sets))
    return Dispatcher(router, authorizer or Authorizer(), handler_sets)
