def test_root(client):
    assert client.get("/").json() == {"message": "VenueBook API is running"}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_public_widget_endpoints_allow_any_origin(client):
    preflight = client.options(
        "/widget/token",
        headers={"Origin": "https://shop.example.org", "Access-Control-Request-Method": "POST"},
    )
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-origin"] == "*"

    response = client.post("/widget/token", json={}, headers={"Origin": "https://shop.example.org"})
    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] == "*"


def test_widget_management_keeps_portal_cors(client):
    response = client.get("/widget/settings", headers={"Origin": "https://shop.example.org"})

    assert "access-control-allow-origin" not in response.headers
