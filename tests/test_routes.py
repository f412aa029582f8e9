import asyncio
import copy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from woofeed.db import create_tables
from woofeed.main_app import app
from woofeed.models.products import ProductRecord, ShopRecord
from woofeed.routes import session_factory
from woofeed.spec.feed_spec import ALL_ATTRIBUTES
from woofeed.sync.reprocess import get_shop, upsert_product

client = TestClient(app)


@pytest.fixture
def shop_json(shop):
    return shop.model_dump(mode="json")


def test_home():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_get_spec():
    body = client.get("/api/spec").json()
    assert [a["attribute"] for a in body["attributes"]] == ALL_ATTRIBUTES
    assert body["stats"]["total"] == len(ALL_ATTRIBUTES)
    assert list(body["categories"])[0] == "flags"


def test_get_attribute():
    body = client.get("/api/spec/price").json()
    assert body["attribute"]["requirement"] == "Required"
    assert body["static_value_rules"]["data_type"] == "Number + currency"
    assert client.get("/api/spec/nope").status_code == 404


def test_default_mappings():
    mappings = client.get("/api/spec/mappings/default").json()["mappings"]
    assert mappings["title"] == "name"
    assert mappings["material"] is None


def test_autofill(shop_json, simple_product):
    response = client.post("/api/autofill", json={
        "product": simple_product,
        "shop": shop_json,
        "field_mappings": {"material": "attributes.material"},
        "overrides": {"gender": "unisex"},
    })
    assert response.status_code == 200
    body = response.json()
    assert list(body["values"]) == ALL_ATTRIBUTES
    assert body["values"]["material"] == "Mesh"
    assert body["values"]["gender"] == "unisex"
    assert body["sources"]["gender"] == "override"


def test_autofill_requires_shop_id(simple_product):
    response = client.post("/api/autofill", json={"product": simple_product, "shop": {"currency": "USD"}})
    assert response.status_code == 422


def test_validate(shop_json, simple_product):
    values = client.post("/api/autofill", json={"product": simple_product, "shop": shop_json}).json()["values"]
    body = client.post("/api/validate", json={"attribute_set": values}).json()
    assert body["is_valid"] is False
    assert {"field": "material", "error": 'Required field "material" is missing'} in body["errors"]

    body = client.post("/api/validate", json={"attribute_set": values, "skip_fields": ["material"]}).json()
    assert body["is_valid"] is True


def test_score(shop_json, simple_product):
    body = client.post("/api/score", json={
        "product": simple_product,
        "shop": shop_json,
        "field_mappings": {"material": "attributes.material"},
    }).json()
    assert body["validation"]["is_valid"] is True
    assert body["score"]["no_data_found"] is False
    assert 0 < body["score"]["overall"] < 100
    assert len(body["score"]["category_scores"]) == 15


def test_validate_override():
    assert client.post("/api/overrides/validate", json={"attribute": "condition", "value": "used"}).json() == {
        "is_valid": True,
        "error": None,
    }
    response = client.post("/api/overrides/validate", json={"attribute": "return_window", "value": "two weeks"})
    assert response.status_code == 422
    assert response.json()["detail"] == {"attribute": "return_window", "error": "Must be a whole number"}
    assert client.post("/api/overrides/validate", json={"attribute": "nope", "value": "x"}).status_code == 404


def _feed_request(shop_json, simple_product):
    values = client.post("/api/autofill", json={
        "product": simple_product,
        "shop": shop_json,
        "field_mappings": {"material": "attributes.material"},
    }).json()["values"]
    return {
        "shop": shop_json,
        "products": [
            {"woo_product_id": 101, "auto_filled": values, "is_valid": True},
            {"woo_product_id": 102, "auto_filled": values, "is_valid": False},
        ],
        "validate_entries": True,
    }


def test_feed(shop_json, simple_product):
    body = client.post("/api/feed", json=_feed_request(shop_json, simple_product)).json()
    assert len(body["items"]) == 1
    assert body["seller"]["name"] == "Acme Store"
    assert body["validationStats"]["valid"] == 1
    assert body["generatedAt"].endswith("Z")


def test_feed_jsonl(shop_json, simple_product):
    response = client.post("/api/feed.jsonl", json=_feed_request(shop_json, simple_product))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/jsonl")
    lines = response.text.split("\n")
    assert len(lines) == 1
    assert '"id": "shop1-101-TRS-1"' in lines[0]


# ---------------------------
# Stored products
# ---------------------------
@pytest.fixture
def stored(tmp_path, shop, simple_product):
    url = f"sqlite+aiosqlite:///{tmp_path / 'routes.db'}"

    async def seed():
        engine = create_async_engine(url)
        sm = async_sessionmaker(engine, expire_on_commit=False)
        await create_tables(engine)
        async with sm() as session:
            async with session.begin():
                session.add(ShopRecord(
                    id=shop.id,
                    settings=shop.model_dump(mode="json", exclude={"id"}),
                    field_mappings={"material": "attributes.material"},
                ))
        ids = []
        for woo_id in (101, 102):
            raw = copy.deepcopy(simple_product)
            raw["id"], raw["sku"] = woo_id, f"TRS-{woo_id}"
            async with sm() as session:
                async with session.begin():
                    record, _ = await upsert_product(session, await get_shop(session, shop.id), raw)
                    if woo_id == 102:
                        record.overrides = {"material": "Cotton"}
            ids.append(record.id)
        await engine.dispose()
        return ids

    ids = asyncio.run(seed())
    engine = create_async_engine(url, poolclass=NullPool)
    app.dependency_overrides[session_factory] = lambda: async_sessionmaker(engine, expire_on_commit=False)
    yield ids
    app.dependency_overrides.pop(session_factory, None)


def test_shop_feed(stored):
    body = client.get("/api/shops/shop1/feed", params={"validate_entries": "true"}).json()
    assert sorted(i["id"] for i in body["items"]) == ["shop1-101-TRS-101", "shop1-102-TRS-102"]
    assert body["validationStats"]["invalid"] == 0
    assert client.get("/api/shops/unknown/feed").status_code == 404


def test_override_count_clear_and_reprocess(stored):
    assert client.get("/api/shops/shop1/overrides/material/count").json()["count"] == 1

    response = client.delete("/api/shops/shop1/overrides/material")
    assert response.json() == {"ok": True, "attribute": "material", "cleared": 1}
    assert client.get("/api/shops/shop1/overrides/material/count").json()["count"] == 0

    body = client.post(f"/api/shops/shop1/products/{stored[1]}/reprocess").json()
    assert body["is_valid"] is True
    assert body["auto_filled"]["material"] == "Mesh"

    assert client.post("/api/shops/shop1/products/9999/reprocess").status_code == 404
    assert client.post(f"/api/shops/other/products/{stored[0]}/reprocess").status_code == 404
    assert client.delete("/api/shops/shop1/overrides/nope").status_code == 404


def test_unknown_shop_override_endpoints(stored):
    assert client.get("/api/shops/unknown/overrides/material/count").status_code == 404
    assert client.delete("/api/shops/unknown/overrides/material").status_code == 404
    # the stored shop is untouched
    assert client.get("/api/shops/shop1/overrides/material/count").json()["count"] == 1
