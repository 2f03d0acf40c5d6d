from datetime import date


def test_settings_default_until_saved(client):
    response = client.get("/api/delivery-settings")
    assert response.status_code == 200
    body = response.json()
    assert (body["cutoffHour"], body["cutoffMinute"], body["processingDays"]) == (18, 30, 1)


def test_admin_upserts_single_settings_row(admin_client, client):
    first = admin_client.put("/api/delivery-settings", json={"cutoffHour": 17})
    assert first.status_code == 200
    assert first.json()["cutoffHour"] == 17
    assert first.json()["cutoffMinute"] == 30

    second = admin_client.put("/api/delivery-settings", json={"processingDays": 2})
    assert second.json()["id"] == first.json()["id"]

    saved = client.get("/api/delivery-settings").json()
    assert (saved["cutoffHour"], saved["cutoffMinute"], saved["processingDays"]) == (17, 30, 2)


def test_settings_validation_and_access(admin_client, customer_client):
    assert admin_client.put("/api/delivery-settings", json={"cutoffHour": 24}).status_code == 400
    assert admin_client.put("/api/delivery-settings", json={"processingDays": 0}).status_code == 400
    assert customer_client.put("/api/delivery-settings", json={"cutoffHour": 12}).status_code == 403


def test_non_delivery_days_crud(admin_client, client):
    created = admin_client.post(
        "/api/non-delivery-days",
        json={"date": "2024-12-25T00:00:00.000Z", "reason": "Christmas", "isRecurringYearly": True},
    )
    assert created.status_code == 201, created.text
    day = created.json()
    assert day["date"] == "2024-12-25"
    assert day["isRecurringYearly"] is True

    admin_client.post("/api/non-delivery-days", json={"date": "2024-02-10", "reason": "Tsagaan Sar"})
    listed = client.get("/api/non-delivery-days").json()
    assert [d["date"] for d in listed] == ["2024-02-10", "2024-12-25"]

    assert admin_client.delete(f"/api/non-delivery-days/{day['id']}").status_code == 200
    gone = admin_client.delete(f"/api/non-delivery-days/{day['id']}")
    assert gone.status_code == 404
    assert gone.json() == {"message": "Day not found"}


def test_non_delivery_day_writes_need_admin(client, customer_client):
    body = {"date": "2024-12-25", "reason": "Christmas"}
    assert client.post("/api/non-delivery-days", json=body).status_code == 401
    assert customer_client.post("/api/non-delivery-days", json=body).status_code == 403


def test_delivery_date_estimate(client):
    response = client.get("/api/delivery-date", params={"lang": "en"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "delivery"
    assert body["language"] == "en"
    assert date.fromisoformat(body["date"]) > date(2000, 1, 1)
    assert body["formatted"].endswith(")")


def test_delivery_date_defaults_to_mongolian(client):
    body = client.get("/api/delivery-date").json()
    assert body["language"] == "mn"
    assert " сар/" in body["formatted"]
