"""
Route table and trie-based path matching.

Routes are registered explicitly at startup:

    router = Router()
    router.register("GET", "/orders/list", handler, permission="orders:list")
    router.register("GET", "/orders/detail/{id}", handler)
    match = router.resolve("GET", "/orders/detail/42")
    match.params  # {"id": "42"}

At every depth an exact segment is tried before a named segment, so
"/orders/list" wins over "/orders/{id}" for the path "/orders/list".
"""

import json
import re
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError
from rapidfuzz import fuzz, process, utils

from common.errors import InvalidPayload, RouteNotFound
from common.schemas import Principal, anonymous_principal

Handler = Callable[["Request"], Any]
ModelT = TypeVar("ModelT", bound=BaseModel)


class DuplicateRouteError(ValueError):
    """Raised when (method, pattern) is already registered. The first route stays."""


@dataclass(frozen=True)
class PathSegment:
    value: str
    is_param: bool = False
    param_name: Optional[str] = None


def parse_pattern(pattern: str) -> List[PathSegment]:
    """
    "/orders"           -> [PathSegment("orders")]
    "/orders/{id}"      -> [PathSegment("orders"), PathSegment("{id}", True, "id")]
    Empty segments are dropped, so "/orders/" == "/orders".
    """
    segments: List[PathSegment] = []
    for part in pattern.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            name = part[1:-1]
            if not name:
                raise ValueError(f"Empty parameter name in pattern {pattern!r}")
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PathSegment(value=part))
    return segments


def split_path(path: str) -> List[str]:
    return [part for part in path.strip("/").split("/") if part]


@dataclass(frozen=True)
class Route:
    """One entry of the route table."""

    method: str
    pattern: str
    handler: Handler
    permission: Optional[str] = None
    name: Optional[str] = None
    description: str = ""

    @property
    def param_names(self) -> List[str]:
        return [seg.param_name for seg in parse_pattern(self.pattern) if seg.is_param]


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: Dict[str, str]


@dataclass(frozen=True)
class Request:
    """Generic request handed to route handlers by the dispatcher."""

    method: str
    path: str
    body: bytes = b""
    params: Dict[str, str] = field(default_factory=dict)
    principal: Principal = field(default_factory=anonymous_principal)

    def bind(self, params: Dict[str, str]) -> "Request":
        return replace(self, params=dict(params))


class _Node:
    __slots__ = ("children", "param_child", "routes")

    def __init__(self) -> None:
        self.children: Dict[str, "_Node"] = {}
        self.param_child: Optional["_Node"] = None
        self.routes: Dict[str, Route] = {}


class Router:
    def __init__(self) -> None:
        self._root = _Node()
        self._routes: List[Route] = []
        self._frozen = False
        self._lock = threading.Lock()

    def register(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        permission: Optional[str] = None,
        name: Optional[str] = None,
        description: str = "",
    ) -> Route:
        route = Route(
            method=method.upper(),
            pattern="/" + pattern.strip("/"),
            handler=handler,
            permission=permission,
            name=name or getattr(handler, "__name__", None),
            description=description,
        )
        self.add(route)
        return route

    def add(self, route: Route) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("Cannot add routes after the router is frozen.")

            node = self._root
            for seg in parse_pattern(route.pattern):
                if seg.is_param:
                    if node.param_child is None:
                        node.param_child = _Node()
                    node = node.param_child
                else:
                    node = node.children.setdefault(seg.value, _Node())

            if route.method in node.routes:
                existing = node.routes[route.method]
                raise DuplicateRouteError(
                    f"{route.method} {route.pattern} conflicts with {existing.pattern}"
                )
            node.routes[route.method] = route
            self._routes.append(route)

    def freeze(self) -> None:
        """No more routes can be added after this."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> List[Route]:
        """All routes, in registration order."""
        return list(self._routes)

    def resolve(self, method: str, path: str) -> RouteMatch:
        """
        Returns the RouteMatch for (method, path).
        Raises RouteNotFound if nothing matches.
        """
        method = method.upper()
        allowed: Set[str] = set()
        found = self._match(self._root, split_path(path), 0, [], method, allowed)

        if found is None:
            if allowed:
                raise RouteNotFound(
                    f"Method {method} not allowed for {path!r}; allowed: {', '.join(sorted(allowed))}"
                )
            raise RouteNotFound(f"No route matches {method} {path!r}")

        route, values = found
        return RouteMatch(route=route, params=dict(zip(route.param_names, values)))

    def _match(
        self,
        node: _Node,
        parts: List[str],
        index: int,
        values: List[str],
        method: str,
        allowed: Set[str],
    ) -> Optional[Tuple[Route, List[str]]]:
        if index == len(parts):
            route = node.routes.get(method)
            if route is not None:
                return route, values
            allowed.update(node.routes)
            return None

        part = parts[index]

        # 1. exact segment
        child = node.children.get(part)
        if child is not None:
            found = self._match(child, parts, index + 1, values, method, allowed)
            if found is not None:
                return found

        # 2. named segment
        if node.param_child is not None:
            return self._match(node.param_child, parts, index + 1, values + [part], method, allowed)

        return None

    def search(self, query: str) -> List[Route]:
        """
        Filters the route table. A missing leading "/" is added for path matching.

        "*" in the query makes it a wildcard over the whole path ("orders/*").
        Otherwise: case-insensitive substring over path, method, name and description.
        If that finds nothing, routes are ranked by a weighted fuzzy score
        (path x3, name x1.5, description x1), so "ordrs list" still finds /orders/list.
        """
        query = query.strip()
        if not query:
            return self.routes

        path_query = query if query.startswith("/") else "/" + query

        if "*" in path_query:
            regex = re.compile(".*".join(re.escape(piece) for piece in path_query.split("*")), re.IGNORECASE)
            return [route for route in self._routes if regex.fullmatch(route.pattern)]

        needle = query.lower()
        path_needle = path_query.lower()
        matches = [
            route
            for route in self._routes
            if path_needle in route.pattern.lower()
            or needle == route.method.lower()
            or needle in (route.name or "").lower()
            or needle in route.description.lower()
        ]
        if matches:
            return matches

        return self._fuzzy_search(query)

    def _fuzzy_search(self, query: str) -> List[Route]:
        results = process.extract(
            utils.default_process(query),
            self._routes,
            scorer=_weighted_route_score,
            limit=None,
            score_cutoff=FUZZY_SCORE_CUTOFF,
        )
        # extract() sorts by score, best first
        return [route for route, score, _index in results if score >= FUZZY_SCORE_CUTOFF]


# Fuzzy catalog search: field weights and minimum score (0-100)
FUZZY_WEIGHTS = (("pattern", 3.0), ("name", 1.5), ("description", 1.0))
FUZZY_SCORE_CUTOFF = 70.0


def _weighted_route_score(query: str, route: Route, **kwargs) -> float:
    total = 0.0
    for attr, weight in FUZZY_WEIGHTS:
        text = utils.default_process(getattr(route, attr) or "")
        total += fuzz.WRatio(query, text) * weight
    return total / sum(weight for _attr, weight in FUZZY_WEIGHTS)


# --- Parameter extraction ---

def path_param(request: Request, name: str) -> str:
    try:
        return request.params[name]
    except KeyError:
        raise InvalidPayload(f"Missing path parameter '{name}'")


def json_body(request: Request) -> Any:
    if not request.body or not request.body.strip():
        raise InvalidPayload("Request body is empty")
    try:
        return json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidPayload(f"Request body is not valid JSON: {e}")


def parse_body(request: Request, model: Type[ModelT]) -> ModelT:
    data = json_body(request)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise InvalidPayload(f"Invalid request body: {problems}")
