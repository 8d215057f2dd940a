from datetime import timedelta
from decimal import Decimal

from src.core.clock import utcnow
from src.infrastructure.database.models import Alert

NOW = utcnow()


def test_dashboard_metrics_includes_formatted_total(client, seed, make_order):
    seed(
        make_order("1000.00", NOW),
        make_order("234.50", NOW),
    )

    resp = client.get("/dashboard/metrics")

    assert resp.status_code == 200
    body = resp.json()
    assert body["totalOrders"] == 2
    assert Decimal(body["totalSales"]) == Decimal("1234.50")
    assert body["formattedTotalSales"] == "$1,234.50"
    assert {"averageOrderValue", "totalCustomers", "conversionRate"} <= set(body)


def test_sales_chart_empty(client):
    resp = client.get("/dashboard/sales-chart")
    assert resp.status_code == 200
    assert resp.json() == []


def test_products_page_envelope(client, seed, make_product):
    seed(make_product("Lamp", inventory=2), make_product("Desk", inventory=30))

    resp = client.get("/products", params={"page": 0, "size": 1})

    assert resp.status_code == 200
    body = resp.json()
    assert body["totalElements"] == 2
    assert body["totalPages"] == 2
    assert body["content"][0]["name"] == "Lamp"
    assert body["content"][0]["reviewCount"] == 3


def test_low_stock_and_search(client, seed, make_product):
    seed(make_product("Lamp", inventory=2), make_product("Desk", inventory=30))

    low = client.get("/products/low-stock", params={"threshold": 5}).json()
    assert [p["name"] for p in low] == ["Lamp"]

    found = client.get("/products/search", params={"q": "DES"}).json()
    assert [p["name"] for p in found["content"]] == ["Desk"]


def test_top_selling_carries_revenue(client, seed, make_product, make_order):
    (lamp,) = seed(make_product("Lamp"))
    seed(make_order("30.00", NOW, items=[(lamp, 3, "10.00")]))

    body = client.get("/products/top-selling", params={"limit": 5}).json()

    assert body[0]["unitsSold"] == 3
    assert Decimal(body[0]["totalRevenue"]) == Decimal("30.00")


def test_invalid_parameters_are_400(client):
    resp = client.get("/products/top-selling", params={"limit": 0})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"
    assert client.get("/products", params={"size": 1000}).status_code == 400
    assert client.get("/products/search", params={"q": "  "}).status_code == 400
    assert client.get("/alerts/severity/bogus").status_code == 400


def test_alert_lifecycle_over_http(client, sender, notifier):
    created = client.post(
        "/alerts",
        json={
            "type": "sales_drop",
            "title": "Sales down",
            "message": "Sales fell 20% week over week",
            "severity": "high",
            "metadata": {"drop": 0.2},
        },
    )
    assert created.status_code == 201
    alert = created.json()
    assert alert["isRead"] is False
    assert alert["metadata"] == {"drop": 0.2}

    assert client.get("/alerts/count/unread").json() == {"count": 1}
    assert [a["id"] for a in client.get("/alerts/unread").json()] == [alert["id"]]

    read = client.post(f"/alerts/{alert['id']}/mark-read")
    assert read.status_code == 200
    assert read.json()["isRead"] is True
    assert client.get("/alerts/unread").json() == []
    assert client.get("/alerts/count/unread").json() == {"count": 0}

    queued = []
    while not notifier.queue.empty():
        queued.append(notifier.queue.get_nowait()[1].event_type)
    assert queued == ["ALERT_CREATED", "ALERT_READ"]


def test_alert_listing_and_not_found(client, seed):
    seed(
        Alert(
            type="review", title="old", message="m", severity="low",
            created_at=NOW - timedelta(days=1),
        ),
        Alert(type="review", title="new", message="m", severity="info"),
    )

    page = client.get("/alerts").json()
    assert [a["title"] for a in page["content"]] == ["new", "old"]
    assert [a["title"] for a in client.get("/alerts/type/review").json()] == [
        "new",
        "old",
    ]

    missing = client.post("/alerts/9999/mark-read")
    assert missing.status_code == 404
    assert missing.json() == {
        "error": "NOT_FOUND",
        "message": "Alert not found: 9999",
    }


def test_register_and_login(client):
    register = client.post(
        "/auth/register",
        json={
            "username": "grace",
            "email": "grace@example.com",
            "password": "hopper-1906",
            "confirmPassword": "hopper-1906",
        },
    )
    assert register.status_code == 201
    assert register.json()["user"]["role"] == "user"
    assert register.json()["tokenType"] == "bearer"

    login = client.post(
        "/auth/login", json={"username": "grace", "password": "hopper-1906"}
    )
    assert login.status_code == 200
    assert login.json()["token"]

    bad = client.post("/auth/login", json={"username": "grace", "password": "nope"})
    assert bad.status_code == 401


def test_register_password_mismatch_is_422(client):
    resp = client.post(
        "/auth/register",
        json={
            "username": "grace",
            "email": "grace@example.com",
            "password": "hopper-1906",
            "confirmPassword": "hopper-1907",
        },
    )
    assert resp.status_code == 422


def test_health_ready(client):
    health = client.get("/healthz")
    assert health.status_code == 200
    assert health.json()["database"] is True
    assert client.get("/readyz").status_code == 200


def test_readyz_not_ready(client):
    from src.main import app

    app.state.ready_event.clear()
    resp = client.get("/readyz")
    assert resp.status_code == 503


def test_healthz_database_down(client):
    from src.main import app

    class DeadDatabase:
        def ping(self):
            raise RuntimeError("db down")

    app.state.db = DeadDatabase()
    resp = client.get("/healthz")
    assert resp.status_code == 503
    assert "db down" in resp.text


def test_metrics_exposition(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "analytics_cache_misses_total" in resp.text


def test_out_of_range_paging_and_ids(client):
    resp = client.get("/products", params={"page": 10**18, "size": 100})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"

    assert client.get("/alerts", params={"page": 10**18}).status_code == 400
    assert client.post(f"/alerts/{2**63}/mark-read").status_code == 404
