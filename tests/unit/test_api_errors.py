"""Unit tests for app/api/errors.py (application-level JSON error handlers)."""
ERROR_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:Error"


def test_unknown_route_returns_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Not Found"


def test_unknown_scim_route_returns_scim_error(client):
    resp = client.get("/scim/v2/Groups")

    assert resp.status_code == 404
    data = resp.get_json()
    assert data["schemas"] == [ERROR_SCHEMA]
    assert data["status"] == "404"


def test_wrong_method_on_scim_route(client):
    resp = client.delete("/scim/v2/ServiceProviderConfig")

    assert resp.status_code == 405
    assert resp.get_json()["schemas"] == [ERROR_SCHEMA]


def test_uncaught_exception_is_rendered_as_500(flask_app, client, monkeypatch):
    def _boom(resource_id):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(flask_app.config["SCIM_HANDLER"], "get", _boom)

    resp = client.get("/scim/v2/Users/abc")

    assert resp.status_code == 500
    data = resp.get_json()
    assert data["schemas"] == [ERROR_SCHEMA]
    assert data["detail"] == "An unexpected error occurred"
