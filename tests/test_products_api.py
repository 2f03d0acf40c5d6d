import json

import pytest

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_list_and_filter(client, make_product):
    make_product(name="Beef ribs", category="beef")
    make_product(name="Lamb leg", category="lamb")

    everything = client.get("/api/products")
    assert everything.status_code == 200
    assert [p["name"] for p in everything.json()] == ["Beef ribs", "Lamb leg"]

    lamb = client.get("/api/products", params={"category": "lamb"}).json()
    assert [p["category"] for p in lamb] == ["lamb"]


def test_get_product(client, make_product):
    ribs = make_product(price="25000.00", stock=7)
    product = client.get(f"/api/products/{ribs}").json()
    assert product["price"] == 25000
    assert product["stock"] == 7
    assert product["imageUrl"] == ""

    missing = client.get("/api/products/999")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Product not found"}


def test_admin_creates_product_from_json(admin_client):
    response = admin_client.post(
        "/api/products",
        json={"name": "Хонины мах", "nameEn": "Mutton", "category": "lamb", "price": 18000},
    )
    assert response.status_code == 201, response.text
    product = response.json()
    assert product["nameEn"] == "Mutton"
    assert product["stock"] == 999
    assert product["price"] == 18000


def test_admin_creates_product_from_multipart(admin_client, client):
    payload = {"name": "Brisket", "category": "beef", "price": 32000, "stock": 5}
    response = admin_client.post(
        "/api/products",
        data={"productData": json.dumps(payload), "description": "Slow cook cut"},
        files={"image": ("brisket photo.png", PNG, "image/png")},
    )
    assert response.status_code == 201, response.text
    product = response.json()
    assert product["stock"] == 5
    assert product["description"] == "Slow cook cut"
    assert product["imageUrl"].startswith("/uploads/products/")
    assert product["imageUrl"].endswith("_brisket_photo.png")

    image = client.get(product["imageUrl"])
    assert image.status_code == 200
    assert image.content == PNG


def test_name_and_category_required(admin_client):
    response = admin_client.post("/api/products", json={"name": "Brisket"})
    assert response.status_code == 400
    assert response.json() == {"message": "Product name and category are required"}


def test_product_writes_need_admin(client, customer_client, make_product):
    ribs = make_product()
    body = {"name": "Brisket", "category": "beef"}

    assert client.post("/api/products", json=body).status_code == 401
    assert customer_client.post("/api/products", json=body).status_code == 403
    assert customer_client.put(f"/api/products/{ribs}", json={"price": 1}).status_code == 403
    assert customer_client.delete(f"/api/products/{ribs}").status_code == 403


def test_partial_update(admin_client, make_product):
    ribs = make_product(price="25000.00", stock=10)

    response = admin_client.put(f"/api/products/{ribs}", json={"price": 27000, "stock": 4})
    assert response.status_code == 200
    product = response.json()
    assert product["price"] == 27000
    assert product["stock"] == 4
    assert product["name"] == "Beef ribs"

    assert admin_client.put(f"/api/products/{ribs}", json={"stock": -1}).status_code == 400
    assert admin_client.put("/api/products/999", json={"stock": 1}).status_code == 404


def test_delete_product(admin_client, client, make_product):
    ribs = make_product()

    response = admin_client.delete(f"/api/products/{ribs}")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get(f"/api/products/{ribs}").status_code == 404
    assert admin_client.delete(f"/api/products/{ribs}").status_code == 404


def test_orders_survive_product_deletion(admin_client, client, make_product):
    ribs = make_product()
    order = client.post("/api/orders", json={
        "customerName": "Bat", "customerEmail": "bat@shop.mn", "customerPhone": "99112233",
        "customerAddress": "Ulaanbaatar", "items": [{"productId": ribs, "quantity": 1, "price": 25}],
    }).json()

    admin_client.delete(f"/api/products/{ribs}")

    kept = admin_client.get(f"/api/orders/{order['id']}").json()
    assert kept["items"][0]["productId"] == ribs
    assert kept["items"][0]["product"] is None


def test_null_fields_leave_product_unchanged(admin_client, make_product):
    ribs = make_product(price="25000.00", stock=10)

    response = admin_client.put(f"/api/products/{ribs}", json={"name": None, "price": None, "stock": 3})
    assert response.status_code == 200
    product = response.json()
    assert product["name"] == "Beef ribs"
    assert product["price"] == 25000
    assert product["stock"] == 3


@pytest.mark.parametrize("raw", ["[1, 2]", "\"brisket\"", "7"])
def test_product_data_must_be_an_object(admin_client, raw):
    response = admin_client.post("/api/products", data={"productData": raw})
    assert response.status_code == 400
    assert response.json() == {"message": "productData must be an object"}


def test_rejected_create_stores_no_image(admin_client, tmp_path):
    response = admin_client.post(
        "/api/products",
        data={"productData": json.dumps({"name": "Brisket"})},
        files={"image": ("brisket.png", PNG, "image/png")},
    )
    assert response.status_code == 400
    assert not (tmp_path / "uploads").exists()

    invalid = admin_client.post(
        "/api/products",
        data={"productData": json.dumps({"name": "Brisket", "category": "beef", "stock": -5})},
        files={"image": ("brisket.png", PNG, "image/png")},
    )
    assert invalid.status_code == 400
    assert not (tmp_path / "uploads").exists()


def test_rejected_update_stores_no_image(admin_client, make_product, tmp_path):
    ribs = make_product()
    files = {"image": ("ribs.png", PNG, "image/png")}

    invalid = admin_client.put(f"/api/products/{ribs}", data={"stock": "-1"}, files=files)
    assert invalid.status_code == 400

    missing = admin_client.put("/api/products/999", data={"stock": "3"}, files=files)
    assert missing.status_code == 404

    uploads = tmp_path / "uploads"
    assert not uploads.exists() or not any(p.is_file() for p in uploads.rglob("*"))


def test_update_replaces_image(admin_client, client, make_product):
    ribs = make_product()
    response = admin_client.put(
        f"/api/products/{ribs}", data={"stock": "3"}, files={"image": ("ribs.png", PNG, "image/png")}
    )
    assert response.status_code == 200
    product = response.json()
    assert product["stock"] == 3
    assert product["imageUrl"].startswith("/uploads/products/")
    assert client.get(product["imageUrl"]).content == PNG
