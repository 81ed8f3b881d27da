import os
import logging
from typing import Annotated, Iterable, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from .errors import PermissionDenied
from .schemas import Principal

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PROD_SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# Grants every permission, e.g. for the admin role
ALL_PERMISSION = "*:*:*"
WILDCARD = "*"

# auto_error=False: requests without a token run as the anonymous principal
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_payload(
    auth: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> dict:
    """
    Decodes the bearer token.
    No token -> empty payload (anonymous). Bad token -> 401.
    """
    if auth is None:
        return {}

    try:
        return jwt.decode(auth.credentials, SECRET_KEY, algorithms=[ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_principal(payload: dict = Depends(get_token_payload)) -> Principal:
    """
    Main dependency for request handlers.
    Turns the token payload into a Principal.
    A signed token with malformed claims is treated like an invalid token.
    """
    try:
        return principal_from_payload(payload)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def principal_from_payload(payload: dict) -> Principal:
    # pydantic maps sub -> id and perms -> permissions
    return Principal(**{**payload, "raw_payload": payload})


def create_token(data: dict) -> str:
    """Signs a payload. Used by the test suite and local tooling; the service never issues tokens."""
    return jwt.encode(data, SECRET_KEY, algorithm=ALGORITHM)


def _segments_match(granted: str, required: str) -> bool:
    granted_parts = granted.split(":")
    required_parts = required.split(":")
    if len(granted_parts) != len(required_parts):
        return False
    return all(g == WILDCARD or g == r for g, r in zip(granted_parts, required_parts))


class Authorizer:
    """
    Evaluates a permission string against the permissions of a Principal.

    authorizer.check(principal, "orders:list")   -> bool
    authorizer.require(principal, "orders:list") -> raises PermissionDenied
    """

    def check(self, principal: Principal, required: Optional[str]) -> bool:
        if required is None:
            return True
        return self.grants(principal.permissions, required)

    def require(self, principal: Principal, required: Optional[str]) -> None:
        if not self.check(principal, required):
            if principal.is_anonymous:
                # no token was sent
                logger.info("Permission '%s' denied for anonymous request", required)
            else:
                logger.warning("Permission '%s' denied for principal '%s'", required, principal.id)
            raise PermissionDenied(required, principal.id)

    @staticmethod
    def grants(permissions: Iterable[str], required: str) -> bool:
        permissions = set(permissions)
        if ALL_PERMISSION in permissions or required in permissions:
            return True
        return any(_segments_match(granted, required) for granted in permissions)


class CheckPermission:
    """
    Guard for routes declared directly on FastAPI.
    Usage: Depends(CheckPermission("routes:list"))
    """
    def __init__(self, permission: str, authorizer: Optional[Authorizer] = None):
        self.permission = permission
        self.authorizer = authorizer or Authorizer()

    async def __call__(self, principal: Principal = Depends(get_current_principal)) -> Principal:
        self.authorizer.require(principal, self.permission)
        return principal


PrincipalDependency = Annotated[Principal, Depends(get_current_principal)]
