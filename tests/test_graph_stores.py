"""
Tests for the Microsoft Graph session and the Intune / Entra stores.

The HTTP layer is a mocked requests.Session; responses are real
requests.Response objects so raise_for_status behaves as in production.
"""

import json
from unittest.mock import MagicMock

import jwt
import pytest
import requests

from device_cleanup.services.base import DeleteFailure, LookupFailure
from device_cleanup.services.entra import EntraDirectoryStore
from device_cleanup.services.graph import (
    AuthenticationError,
    GraphError,
    GraphSession,
    odata_quote,
)
from device_cleanup.services.intune import IntuneInventoryStore

GRAPH = "https://graph.microsoft.com/v1.0"


def make_response(status=200, body=None, url="https://graph.test/"):
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = "OK" if status < 400 else "Error"
    response._content = b"" if body is None else json.dumps(body).encode()
    return response


def make_token(roles=None):
    return jwt.encode({"roles": roles or []}, "device-cleanup-test-signing-key-0123456789", algorithm="HS256")


@pytest.fixture
def http():
    session = MagicMock(spec=requests.Session)
    session.post.return_value = make_response(200, {"access_token": make_token(), "expires_in": 3600})
    return session


@pytest.fixture
def graph(http):
    return GraphSession("tenant-123", "client-456", "s3cret", session=http)


def test_odata_quote_escapes_single_quotes():
    assert odata_quote("Bob's-PC") == "'Bob''s-PC'"


def test_missing_credentials_rejected(http):
    with pytest.raises(AuthenticationError):
        GraphSession("tenant", "", "secret", session=http)


def test_token_is_cached(graph, http):
    http.request.return_value = make_response(200, {"value": []})

    graph.get_all("/devices")
    graph.get_all("/devices")

    assert http.post.call_count == 1
    token_url = http.post.call_args.args[0]
    assert token_url == "https://login.microsoftonline.com/tenant-123/oauth2/v2.0/token"
    assert http.post.call_args.kwargs["data"]["scope"] == "https://graph.microsoft.com/.default"


def test_token_failure_raises_authentication_error(graph, http):
    http.post.return_value = make_response(401, {"error": "invalid_client"})

    with pytest.raises(AuthenticationError):
        graph.connect()


def test_get_all_follows_next_link(graph, http):
    next_link = f"{GRAPH}/devices?$skiptoken=abc"
    http.request.side_effect = [
        make_response(200, {"value": [{"id": "1"}], "@odata.nextLink": next_link}),
        make_response(200, {"value": [{"id": "2"}]}),
    ]

    items = graph.get_all("/devices", params={"$filter": "x"})

    assert [i["id"] for i in items] == ["1", "2"]
    first, second = http.request.call_args_list
    assert first.args == ("GET", f"{GRAPH}/devices")
    assert first.kwargs["params"] == {"$filter": "x"}
    assert second.args == ("GET", next_link)
    assert second.kwargs["params"] is None


def test_http_error_becomes_graph_error(graph, http):
    http.request.return_value = make_response(403, {"error": {"code": "Forbidden"}})

    with pytest.raises(GraphError) as exc_info:
        graph.request("GET", "/devices")

    assert exc_info.value.status_code == 403
    assert "Forbidden" in exc_info.value.body


def test_connection_error_becomes_graph_error(graph, http):
    http.request.side_effect = requests.ConnectionError("boom")

    with pytest.raises(GraphError) as exc_info:
        graph.request("GET", "/devices")

    assert exc_info.value.status_code is None


def test_check_capabilities_reports_missing_roles(http):
    http.post.return_value = make_response(200, {
        "access_token": make_token(["DeviceManagementManagedDevices.ReadWrite.All", "Device.Read.All"]),
        "expires_in": 3600,
    })
    graph = GraphSession("t", "c", "s", session=http)

    assert graph.check_capabilities() == ["delete directory records"]


def test_check_capabilities_all_granted(http):
    http.post.return_value = make_response(200, {
        "access_token": make_token(["DeviceManagementManagedDevices.ReadWrite.All", "Device.ReadWrite.All"]),
        "expires_in": 3600,
    })
    graph = GraphSession("t", "c", "s", session=http)

    assert graph.check_capabilities() == []


def test_close_closes_http_session(graph, http):
    with graph:
        pass

    http.close.assert_called_once()
    assert graph.access_token is None


def test_intune_find_by_name_builds_filter(graph, http):
    http.request.return_value = make_response(200, {"value": [
        {"id": "i-1", "deviceName": "Bob's-PC", "azureADDeviceId": "abc-123", "osVersion": "10"},
    ]})

    records = IntuneInventoryStore(graph).find_by_name("Bob's-PC")

    assert len(records) == 1
    assert records[0].id == "i-1"
    assert records[0].directory_device_id == "abc-123"
    call = http.request.call_args
    assert call.args == ("GET", f"{GRAPH}/deviceManagement/managedDevices")
    assert call.kwargs["params"]["$filter"] == "deviceName eq 'Bob''s-PC'"
    assert call.kwargs["params"]["$select"] == "id,deviceName,azureADDeviceId"


def test_intune_lookup_error_is_lookup_failure(graph, http):
    http.request.return_value = make_response(500, {"error": "oops"})

    with pytest.raises(LookupFailure) as exc_info:
        IntuneInventoryStore(graph).find_by_name("X")

    assert exc_info.value.status_code == 500


def test_intune_delete(graph, http):
    http.request.return_value = make_response(204)

    IntuneInventoryStore(graph).delete_by_id("i-1")

    assert http.request.call_args.args == ("DELETE", f"{GRAPH}/deviceManagement/managedDevices/i-1")


def test_intune_delete_error_is_delete_failure(graph, http):
    http.request.return_value = make_response(404, {"error": "gone"})

    with pytest.raises(DeleteFailure):
        IntuneInventoryStore(graph).delete_by_id("i-1")


def test_entra_find_by_display_name(graph, http):
    http.request.return_value = make_response(200, {"value": [
        {"id": "d-1", "displayName": "LAPTOP-001", "deviceId": "abc-123"},
        {"id": "d-2", "displayName": "LAPTOP-001", "deviceId": "xyz-999"},
    ]})

    records = EntraDirectoryStore(graph).find_by_display_name("LAPTOP-001")

    assert [(r.id, r.device_id) for r in records] == [("d-1", "abc-123"), ("d-2", "xyz-999")]
    assert http.request.call_args.kwargs["params"]["$filter"] == "displayName eq 'LAPTOP-001'"


def test_entra_delete_error_is_delete_failure(graph, http):
    http.request.return_value = make_response(403, {"error": "denied"})

    with pytest.raises(DeleteFailure) as exc_info:
        EntraDirectoryStore(graph).delete_by_id("d-1")

    assert exc_info.value.status_code == 403
