def test_admin_panel_requires_admin(client, admin_headers, customer_headers):
    res = client.get("/admin-panel", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["message"] == "Admin panel accessed"
    assert res.json()["user"]["role"] == "admin"

    res = client.get("/admin-panel", headers=customer_headers)
    assert res.status_code == 403
    assert res.json()["detail"] == "Forbidden. Admin access required."


def test_customer_dashboard_requires_customer(client, admin_headers, customer_headers):
    assert client.get("/customer-dashboard", headers=customer_headers).status_code == 200
    assert client.get("/customer-dashboard", headers=admin_headers).status_code == 403
    assert client.get("/customer-dashboard").status_code == 401


def test_audit_log_records_actions(client, admin_headers, customer_headers, make_product):
    product = make_product()
    client.post("/cart", json={"product_id": product["id"], "quantity": 1}, headers=customer_headers)
    client.post("/auth/login", json={"email": "alice@shop.com", "password": "nope-nope"})

    res = client.get("/logs", headers=admin_headers, params={"page_size": 100})
    assert res.status_code == 200
    actions = [(e["action"], e["status"]) for e in res.json()["items"]]
    assert ("PRODUCT_CREATE", "SUCCESS") in actions
    assert ("CART_ADD", "SUCCESS") in actions
    assert ("LOGIN", "FAIL") in actions

    res = client.get("/logs", headers=admin_headers, params={"action": "CART_ADD"})
    assert res.json()["total"] == 1
    assert res.json()["items"][0]["meta"] == {"product_id": product["id"], "quantity": 1, "total": 10.0}


def test_root(client):
    assert client.get("/").json() == {"message": "Storefront API is running"}
