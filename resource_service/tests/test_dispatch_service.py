import json
import pytest
from common.errors import PermissionDenied, RouteNotFound
from common.schemas import Principal
from resource_service.routing import Request
from resource_service.services.dispatch_service import build_dispatcher


def request(method, path, principal, body=None):
    raw = json.dumps(body).encode() if body is not None else b""
    return Request(method=method, path=path, body=raw, principal=principal)


def test_build_dispatcher_registers_all_types(dispatcher):
    assert set(dispatcher.handler_sets) == {"orders", "bom", "products", "users"}
    # six routes per resource type
    assert len(dispatcher.router.routes) == 24
    assert dispatcher.router.frozen


def test_build_dispatcher_rejects_repeated_type():
    with pytest.raises(ValueError):
        build_dispatcher(["orders", "orders"])


def test_dispatch_create_and_list(dispatcher, admin):
    created = dispatcher.dispatch(request("POST", "/bom/create", admin, {"name": "widget"}))
    listed = dispatcher.dispatch(request("GET", "/bom/list", admin))

    assert created.id == 1
    assert [r.payload for r in listed] == [{"name": "widget"}]


def test_dispatch_binds_path_params(dispatcher, admin):
    dispatcher.dispatch(request("POST", "/products/add", admin, {"name": "widget"}))
    found = dispatcher.dispatch(request("GET", "/products/detail/1", Principal()))
    assert found.payload == {"name": "widget"}


def test_detail_needs_no_permission(dispatcher, admin):
    dispatcher.handler_set("users").create({"name": "Alice"})
    found = dispatcher.dispatch(request("GET", "/users/detail/1", Principal()))
    assert found.payload == {"name": "Alice"}


def test_denied_request_leaves_store_unchanged(dispatcher):
    orders = dispatcher.handler_set("orders")
    orders.create({"name": "widget"})
    before = orders.list()
    reader = Principal(sub="reader", perms=["orders:list"])

    for method, path, body in [
        ("POST", "/orders/create", {"name": "gadget"}),
        ("POST", "/orders/edit", {"id": 1, "payload": {"name": "gadget"}}),
        ("POST", "/orders/remove", {"id": 1}),
    ]:
        with pytest.raises(PermissionDenied):
            dispatcher.dispatch(request(method, path, reader, body))

    assert orders.list() == before


def test_permission_check_runs_before_body_is_read(dispatcher):
    bad = Request(method="POST", path="/orders/create", body=b"{broken", principal=Principal())
    with pytest.raises(PermissionDenied):
        dispatcher.dispatch(bad)


def test_permissions_are_per_resource_type(dispatcher):
    principal = Principal(sub="u", perms=["orders:list"])
    assert dispatcher.dispatch(request("GET", "/orders/list", principal)) == []
    with pytest.raises(PermissionDenied):
        dispatcher.dispatch(request("GET", "/bom/list", principal))


def test_unknown_route(dispatcher, admin):
    with pytest.raises(RouteNotFound):
        dispatcher.dispatch(request("GET", "/invoices/list", admin))
