import logging
from typing import Any, Dict, List
from common.errors import InvalidPayload, ResourceNotFound
from resource_service.routing import Request, Router, json_body, parse_body, path_param
from resource_service.schemas import EditRequest, RemoveRequest, RemoveResponse, Resource, is_plain_id
from resource_service.store import ResourceStore

logger = logging.getLogger(__name__)


class ResourceHandlerSet:
    """
    list/detail/create/edit/remove for one resource type.
    The store is passed in; the handler set keeps no resources of its own.
    """

    def __init__(self, store: ResourceStore):
        self.store = store
        self.resource_type = store.resource_type

    def permission(self, action: str) -> str:
        return f"{self.resource_type}:{action}"

    # --- Operations ---

    def list(self) -> List[Resource]:
        """All resources in creation order."""
        return self.store.list()

    def detail(self, resource_id: int) -> Resource:
        return self.store.get(resource_id)

    def create(self, payload: Dict[str, Any]) -> Resource:
        """Every call allocates a new id, so retrying a create makes a duplicate."""
        return self.store.create(payload)

    def edit(self, resource_id: int, payload: Dict[str, Any]) -> Resource:
        return self.store.replace(resource_id, payload)

    def remove(self, resource_ids: List[int]) -> List[int]:
        return self.store.delete_many(resource_ids)

    # --- Route handlers ---

    def handle_list(self, request: Request) -> List[Resource]:
        return self.list()

    def handle_detail(self, request: Request) -> Resource:
        raw_id = path_param(request, "id")
        if not is_plain_id(raw_id):
            # No resource can carry a non-numeric id
            raise ResourceNotFound(self.resource_type, raw_id)
        return self.detail(int(raw_id))

    def handle_create(self, request: Request) -> Resource:
        payload = json_body(request)
        if not isinstance(payload, dict):
            raise InvalidPayload(f"{self.resource_type} payload must be a JSON object")
        return self.create(payload)

    def handle_edit(self, request: Request) -> Resource:
        data = parse_body(request, EditRequest)
        return self.edit(data.id, data.payload)

    def handle_remove(self, request: Request) -> RemoveResponse:
        data = parse_body(request, RemoveRequest)
        removed = self.remove(data.all_ids())
        return RemoveResponse(
            detail=f"Removed {self.resource_type}: {', '.join(str(i) for i in removed)}",
            ids=removed,
        )

    def register_routes(self, router: Router) -> None:
        prefix = f"/{self.resource_type}"
        name = self.resource_type

        router.register(
            "GET", f"{prefix}/list", self.handle_list,
            permission=self.permission("list"),
            name=f"{name}.list",
            description=f"List all {name}",
        )
        router.register(
            "GET", f"{prefix}/detail/{{id}}", self.handle_detail,
            name=f"{name}.detail",
            description=f"Get one {name} record by id",
        )
        for verb in ("create", "add"):
            router.register(
                "POST", f"{prefix}/{verb}", self.handle_create,
                permission=self.permission("add"),
                name=f"{name}.{verb}",
                description=f"Create a {name} record",
            )
        router.register(
            "POST", f"{prefix}/edit", self.handle_edit,
            permission=self.permission("edit"),
            name=f"{name}.edit",
            description=f"Replace the payload of a {name} record",
        )
        router.register(
            "POST", f"{prefix}/remove", self.handle_remove,
            permission=self.permission("remove"),
            name=f"{name}.remove",
            description=f"Remove one or more {name} records",
        )
        logger.info("Registered routes for '%s'", name)
