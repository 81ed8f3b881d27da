from typing import Any, Dict, Optional
from fastapi import status


class ServiceError(Exception):
    """
    Base error for the resource service.
    Every subclass knows its HTTP status and a short machine-readable code.
    """

    code = "service_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        # context is logged, never sent to the client
        self.context = context or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class RouteNotFound(ServiceError):
    code = "route_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDenied(ServiceError):
    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, permission: str, principal_id: Optional[str] = None):
        self.permission = permission
        super().__init__(
            f"Missing permission '{permission}'",
            context={"principal": principal_id},
        )


class ResourceNotFound(ServiceError):
    code = "resource_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} {resource_id} not found")


class InvalidPayload(ServiceError):
    code = "invalid_payload"
    status_code = status.HTTP_400_BAD_REQUEST


class StoreIntegrityError(ServiceError):
    """Internal fault: the store broke one of its own invariants."""

    code = "internal_error"
