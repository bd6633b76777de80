import pytest

from app.models.composite_item import CompositeItemComponent


@pytest.fixture
def masonry(make_category, make_resource, make_composite):
    """Category at 25% with one item made of 5 bags of cement at 10."""
    cat = make_category(name="Albañilería", default_margin=25)
    cement = make_resource(name="Cemento", price=10)
    item = make_composite(cat["id"], [{"resource_id": cement["id"], "quantity": 5}])
    return cat, cement, item


def test_price_is_cost_plus_category_margin(masonry):
    _, _, item = masonry
    assert item["cost_breakdown"] == {"materials": 50.0, "labor": 0.0, "equipment": 0.0, "total": 50.0}
    assert item["margin"] == 25
    assert item["final_price"] == 62.5
    assert item["category"]["name"] == "Albañilería"
    assert item["composition"][0]["subtotal"] == 50.0


def test_cost_breakdown_by_resource_type(make_category, make_resource, make_composite):
    cat = make_category(default_margin=0)
    cement = make_resource(name="Cemento", price=10)
    worker = make_resource(name="Operario", type="labor", unit="h", price=20)
    mixer = make_resource(name="Mezcladora", type="equipment", unit="h", price=8)

    item = make_composite(
        cat["id"],
        [
            {"resource_id": cement["id"], "quantity": 2},
            {"resource_id": worker["id"], "quantity": 0.5},
            {"resource_id": mixer["id"], "quantity": 0.25},
            {"resource_id": cement["id"], "quantity": 1},
        ],
    )

    assert item["cost_breakdown"] == {"materials": 30.0, "labor": 10.0, "equipment": 2.0, "total": 42.0}
    assert item["final_price"] == 42.0
    assert [c["resource"]["name"] for c in item["composition"]] == [
        "Cemento", "Operario", "Mezcladora", "Cemento",
    ]


def test_custom_margin_overrides_category(auth_client, masonry):
    _, _, item = masonry
    resp = auth_client.put(f"/api/composite-items/{item['id']}", json={"custom_margin": 10})
    assert resp.status_code == 200
    assert resp.json()["margin"] == 10
    assert resp.json()["final_price"] == 55.0


def test_category_margin_change_reaches_items_without_custom_margin(
    auth_client, masonry, make_resource, make_composite
):
    cat, cement, default_item = masonry
    custom_item = make_composite(
        cat["id"],
        [{"resource_id": cement["id"], "quantity": 5}],
        name="Muro especial",
        custom_margin=10,
    )

    auth_client.put(f"/api/categories/{cat['id']}", json={"default_margin": 50})

    assert auth_client.get(f"/api/composite-items/{default_item['id']}").json()["final_price"] == 75.0
    assert auth_client.get(f"/api/composite-items/{custom_item['id']}").json()["final_price"] == 55.0


def test_resource_price_change_is_live(auth_client, masonry):
    _, cement, item = masonry
    auth_client.put(f"/api/resources/{cement['id']}", json={"price": 12})
    assert auth_client.get(f"/api/composite-items/{item['id']}").json()["final_price"] == 75.0


def test_create_with_missing_resource_writes_nothing(auth_client, make_category, make_resource):
    cat = make_category()
    cement = make_resource()

    resp = auth_client.post(
        "/api/composite-items",
        json={
            "name": "Muro",
            "unit": "m2",
            "category_id": cat["id"],
            "composition": [
                {"resource_id": cement["id"], "quantity": 1},
                {"resource_id": 404, "quantity": 1},
            ],
        },
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "RESOURCE_NOT_FOUND"
    assert auth_client.get("/api/composite-items").json() == []


def test_create_with_missing_category_is_404(auth_client, make_resource):
    cement = make_resource()
    resp = auth_client.post(
        "/api/composite-items",
        json={
            "name": "Muro",
            "unit": "m2",
            "category_id": 31,
            "composition": [{"resource_id": cement["id"], "quantity": 1}],
        },
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "CATEGORY_NOT_FOUND"


def test_empty_composition_or_zero_quantity_is_422(auth_client, make_category, make_resource):
    cat = make_category()
    cement = make_resource()
    base = {"name": "Muro", "unit": "m2", "category_id": cat["id"]}

    assert auth_client.post("/api/composite-items", json={**base, "composition": []}).status_code == 422
    zero = {**base, "composition": [{"resource_id": cement["id"], "quantity": 0}]}
    assert auth_client.post("/api/composite-items", json=zero).status_code == 422


def test_list_skips_unpriceable_items_but_detail_fails(
    auth_client, db_session, masonry, make_composite
):
    cat, cement, broken = masonry
    healthy = make_composite(cat["id"], [{"resource_id": cement["id"], "quantity": 1}], name="Tarrajeo")

    db_session.query(CompositeItemComponent).filter(
        CompositeItemComponent.composite_item_id == broken["id"]
    ).update({"resource_id": 9999}, synchronize_session=False)
    db_session.commit()

    listed = auth_client.get("/api/composite-items").json()
    assert [i["id"] for i in listed] == [healthy["id"]]

    resp = auth_client.get(f"/api/composite-items/{broken['id']}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "RESOURCE_NOT_FOUND"


def test_filters_and_search_only_active(auth_client, masonry, make_composite):
    cat, cement, item = masonry
    inactive = make_composite(
        cat["id"],
        [{"resource_id": cement["id"], "quantity": 1}],
        name="Muro antiguo",
        active=False,
    )

    hits = auth_client.get("/api/composite-items/search", params={"q": "muro"}).json()
    assert [i["id"] for i in hits] == [item["id"]]

    only_inactive = auth_client.get("/api/composite-items", params={"active": False}).json()
    assert [i["id"] for i in only_inactive] == [inactive["id"]]

    by_cat = auth_client.get("/api/composite-items", params={"category_id": cat["id"]}).json()
    assert len(by_cat) == 2


def test_update_replaces_composition(auth_client, masonry, make_resource):
    _, _, item = masonry
    brick = make_resource(name="Ladrillo", unit="und", price=1)

    resp = auth_client.put(
        f"/api/composite-items/{item['id']}",
        json={"composition": [{"resource_id": brick["id"], "quantity": 40}]},
    )
    body = resp.json()
    assert [c["resource"]["name"] for c in body["composition"]] == ["Ladrillo"]
    assert body["cost_breakdown"]["total"] == 40.0
    assert body["final_price"] == 50.0


def test_duplicate_is_active_copy(auth_client, masonry):
    _, _, item = masonry
    auth_client.put(f"/api/composite-items/{item['id']}", json={"active": False})

    resp = auth_client.post(f"/api/composite-items/{item['id']}/duplicate")
    assert resp.status_code == 201
    copy = resp.json()
    assert copy["id"] != item["id"]
    assert copy["name"] == "Muro m2 (Copy)"
    assert copy["active"] is True
    assert copy["final_price"] == item["final_price"]


def test_price_history_reports_current_figures(auth_client, masonry):
    _, _, item = masonry
    history = auth_client.get(f"/api/composite-items/{item['id']}/price-history").json()
    assert history["item_id"] == item["id"]
    assert history["current_price"] == 62.5
    assert history["current_cost"] == 50.0
    assert history["margin"] == 25


def test_delete_item(auth_client, masonry):
    _, _, item = masonry
    assert auth_client.delete(f"/api/composite-items/{item['id']}").status_code == 200
    resp = auth_client.get(f"/api/composite-items/{item['id']}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "COMPOSITE_ITEM_NOT_FOUND"


def test_quantity_rounding_to_zero_is_422(auth_client, make_category, make_resource):
    cat = make_category()
    cement = make_resource(price=100)

    resp = auth_client.post(
        "/api/composite-items",
        json={
            "name": "Muro",
            "unit": "m2",
            "category_id": cat["id"],
            "composition": [{"resource_id": cement["id"], "quantity": 0.00001}],
        },
    )
    assert resp.status_code == 422
    assert auth_client.get("/api/composite-items").json() == []


def test_quantity_is_stored_at_four_decimals(make_category, make_resource, make_composite):
    cat = make_category(default_margin=0)
    cement = make_resource(price=10)

    item = make_composite(cat["id"], [{"resource_id": cement["id"], "quantity": 0.33333}])
    assert item["composition"][0]["quantity"] == 0.3333
    assert item["cost_breakdown"]["total"] == 3.333
