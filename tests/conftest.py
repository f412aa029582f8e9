import copy

import pytest

from woofeed.models.shop import ShopSettings
from woofeed.woo.product_normalizer import merge_parent_and_variation

SIMPLE_PRODUCT = {
    "id": 101,
    "parent_id": 0,
    "type": "simple",
    "name": "Trail Runner Shoe",
    "sku": "TRS-1",
    "description": "<p>Lightweight &amp; durable trail shoe.</p>",
    "short_description": "",
    "permalink": "https://acme.example/product/trail-runner",
    "global_unique_id": "",
    "meta_data": [{"id": 1, "key": "_gtin", "value": "012345678905"}],
    "regular_price": "79.9",
    "price": "79.9",
    "sale_price": "",
    "date_on_sale_from": None,
    "date_on_sale_to": None,
    "stock_status": "instock",
    "stock_quantity": 12,
    "weight": "1.5",
    "dimensions": {"length": "12", "width": "8", "height": "5"},
    "categories": [
        {"id": 1, "name": "Apparel", "parent": 0},
        {"id": 2, "name": "Shoes", "parent": 1},
    ],
    "brands": [{"id": 9, "name": "Acme"}],
    "images": [
        {"id": 11, "src": "https://acme.example/img/1.jpg"},
        {"id": 12, "src": "https://acme.example/img/2.jpg"},
    ],
    "attributes": [
        {"id": 1, "name": "Color", "options": ["Red", "Blue"]},
        {"id": 2, "name": "Size", "options": ["M"]},
        {"id": 3, "name": "Material", "options": ["Mesh"]},
    ],
    "related_ids": [102, 103],
    "upsell_ids": [],
    "total_sales": 99,
}

VARIABLE_PARENT = {
    "id": 200,
    "parent_id": 0,
    "type": "variable",
    "name": "Tee",
    "sku": "TEE",
    "description": "Soft cotton tee",
    "short_description": "",
    "permalink": "https://acme.example/product/tee",
    "weight": "0.3",
    "dimensions": {"length": "10", "width": "8", "height": "1"},
    "categories": [{"id": 1, "name": "Apparel", "parent": 0}, {"id": 3, "name": "Tops", "parent": 1}],
    "brands": [{"id": 9, "name": "Acme"}],
    "images": [{"id": 21, "src": "https://acme.example/img/tee.jpg"}],
    "attributes": [
        {"id": 1, "name": "Color", "options": ["Red", "Blue"], "variation": True},
        {"id": 2, "name": "Size", "options": ["S", "M"], "variation": True},
    ],
    "related_ids": [],
    "upsell_ids": [],
    "total_sales": 5,
}

VARIATION = {
    "id": 201,
    "name": "Tee - Tee - Red, M",
    "sku": "TEE-R-M",
    "permalink": "https://acme.example/product/tee?attribute_color=Red&attribute_size=M",
    "regular_price": "20",
    "price": "20",
    "sale_price": "",
    "stock_status": "instock",
    "stock_quantity": None,
    "weight": "",
    "dimensions": {"length": "", "width": "", "height": ""},
    "image": {"id": 22, "src": "https://acme.example/img/tee-red.jpg"},
    "attributes": [{"id": 1, "name": "Color", "option": "Red"}, {"id": 2, "name": "Size", "option": "M"}],
    "meta_data": [],
}


@pytest.fixture
def shop():
    return ShopSettings(
        id="shop1",
        shop_name="Acme Store",
        woo_store_url="https://acme.example",
        currency="usd",
        dimension_unit="in",
        weight_unit="lb",
        seller_privacy_policy="https://acme.example/privacy",
        seller_tos="https://acme.example/terms",
        return_policy="https://acme.example/returns",
        return_window=30,
    )


@pytest.fixture
def simple_product():
    return copy.deepcopy(SIMPLE_PRODUCT)


@pytest.fixture
def variable_parent():
    return copy.deepcopy(VARIABLE_PARENT)


@pytest.fixture
def variation():
    return copy.deepcopy(VARIATION)


@pytest.fixture
def merged_variation(variable_parent, variation):
    return merge_parent_and_variation(variable_parent, variation)


@pytest.fixture
def material_mappings():
    # material has no default mapping but is required
    return {"material": "attributes.material"}
