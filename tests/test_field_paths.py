from woofeed.mapping.field_paths import (
    AttributeLookup,
    DirectPath,
    IndexedPath,
    MetaLookup,
    extract,
    first_attribute_option,
    parse_path,
)


def test_parse_path_shapes():
    assert parse_path("name") == DirectPath(("name",))
    assert parse_path("dimensions.length") == DirectPath(("dimensions", "length"))
    assert parse_path("images[0].src") == IndexedPath((("images", 0), ("src", None)))
    assert parse_path("attributes.Color") == AttributeLookup("Color")
    assert parse_path("meta_data._gtin") == MetaLookup("_gtin")


def test_parse_path_rejects_malformed():
    assert parse_path("") is None
    assert parse_path("   ") is None
    assert parse_path("a..b") is None
    assert parse_path("images[x].src") is None
    assert parse_path("attributes.") is None


def test_direct_and_nested(simple_product):
    assert extract(simple_product, "name") == "Trail Runner Shoe"
    assert extract(simple_product, "dimensions.length") == "12"
    assert extract(simple_product, "dimensions.depth") is None


def test_indexed(simple_product):
    assert extract(simple_product, "images[0].src") == "https://acme.example/img/1.jpg"
    assert extract(simple_product, "images[1].src") == "https://acme.example/img/2.jpg"
    assert extract(simple_product, "images[5].src") is None
    assert extract({"images": []}, "images[0].src") is None


def test_attribute_lookup_parent_and_variation(simple_product, variation):
    # parent product: several options are joined, a single one comes back as-is
    assert extract(simple_product, "attributes.color") == "Red, Blue"
    assert extract(simple_product, "attributes.SIZE") == "M"
    # variation: the chosen option
    assert extract(variation, "attributes.color") == "Red"
    assert extract(simple_product, "attributes.pattern") is None


def test_attribute_lookup_matches_taxonomy_prefix():
    raw = {"attributes": [{"name": "pa_color", "options": ["Green"]}]}
    assert extract(raw, "attributes.color") == "Green"


def test_first_attribute_option(simple_product, variation):
    assert first_attribute_option(simple_product, "color") == "Red"
    assert first_attribute_option(variation, "Color") == "Red"
    raw = {"attributes": [{"name": "Brand", "options": ["", "Smith, Jones & Co"]}]}
    assert first_attribute_option(raw, "brand") == "Smith, Jones & Co"
    assert first_attribute_option(None, "brand") is None


def test_meta_lookup(simple_product):
    assert extract(simple_product, "meta_data._gtin") == "012345678905"
    assert extract(simple_product, "meta_data._missing") is None
    assert extract({"meta_data": [{"key": "x", "value": ""}]}, "meta_data.x") is None


def test_extraction_is_total():
    for raw in (None, "text", 42, [], {"attributes": "oops", "meta_data": 5, "images": {"0": 1}}):
        for path in ("name", "images[0].src", "attributes.color", "meta_data._gtin", "", None):
            assert extract(raw, path) is None
