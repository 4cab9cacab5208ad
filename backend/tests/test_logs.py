import pytest


@pytest.fixture
def shopping_trail(client, admin_headers, customer_headers, make_product):
    product = make_product()
    client.post("/cart", json={"product_id": product["id"], "quantity": 1}, headers=customer_headers)
    client.post("/auth/login", json={"email": "alice@shop.com", "password": "wrong-one"})
    return product


def _logs(client, headers, **params):
    res = client.get("/logs", headers=headers, params={"page_size": 100, **params})
    assert res.status_code == 200, res.text
    return res.json()


def test_logs_reject_customers_and_anonymous(client, customer_headers):
    assert client.get("/logs", headers=customer_headers).status_code == 403
    assert client.get("/logs").status_code == 401


def test_filter_by_action_is_exact(client, admin_headers, shopping_trail):
    body = _logs(client, admin_headers, action="cart_add")

    assert body["total"] == 1
    assert body["items"][0]["action"] == "CART_ADD"
    assert body["items"][0]["resource"] == "cart"


def test_filter_by_resource(client, admin_headers, shopping_trail):
    body = _logs(client, admin_headers, resource="auth")

    assert body["total"] > 0
    assert {e["resource"] for e in body["items"]} == {"auth"}
    assert {e["action"] for e in body["items"]} == {"SIGNUP", "LOGIN"}


def test_filter_by_status(client, admin_headers, shopping_trail):
    body = _logs(client, admin_headers, status="FAIL")

    assert [(e["action"], e["meta"]["email"]) for e in body["items"]] == [("LOGIN", "alice@shop.com")]


def test_unknown_status_is_rejected(client, admin_headers):
    res = client.get("/logs", headers=admin_headers, params={"status": "MAYBE"})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "status"


def test_filter_by_user(client, admin_headers, customer_headers, shopping_trail):
    customer_id = client.get("/auth/me", headers=customer_headers).json()["id"]

    body = _logs(client, admin_headers, user_id=customer_id)

    assert {e["user_id"] for e in body["items"]} == {customer_id}
    assert {e["action"] for e in body["items"]} == {"SIGNUP", "LOGIN", "CART_ADD"}


def test_filter_by_time_window(client, admin_headers, shopping_trail):
    everything = _logs(client, admin_headers)["total"]

    assert _logs(client, admin_headers, since="2000-01-01T00:00:00")["total"] == everything
    assert _logs(client, admin_headers, until="2999-01-01T00:00:00")["total"] == everything
    assert _logs(client, admin_headers, since="2999-01-01T00:00:00")["total"] == 0


def test_newest_entries_come_first(client, admin_headers, shopping_trail):
    items = _logs(client, admin_headers)["items"]

    ids = [e["id"] for e in items]
    assert ids == sorted(ids, reverse=True)
    # The failed login was the last thing to happen
    assert (items[0]["action"], items[0]["status"]) == ("LOGIN", "FAIL")


def test_pagination(client, admin_headers, shopping_trail):
    total = _logs(client, admin_headers)["total"]

    first = client.get("/logs", headers=admin_headers, params={"page": 1, "page_size": 2}).json()
    second = client.get("/logs", headers=admin_headers, params={"page": 2, "page_size": 2}).json()
    past_end = client.get("/logs", headers=admin_headers, params={"page": 10**12, "page_size": 2}).json()

    assert len(first["items"]) == 2
    assert first["total"] == second["total"] == past_end["total"] == total
    assert not {e["id"] for e in first["items"]} & {e["id"] for e in second["items"]}
    assert first["items"][-1]["id"] > second["items"][0]["id"]
    assert past_end["items"] == []
