"""Tests for catalog snapshot parsing."""

import pytest

from repricer.services.catalog import VariantPriceUpdate, parse_products


def _graphql_payload() -> dict:
    return {
        "data": {
            "products": {
                "edges": [
                    {
                        "node": {
                            "id": "gid://shopify/Product/1",
                            "title": "Solitaire Ring",
                            "metafields": {
                                "edges": [
                                    {"node": {"namespace": "custom", "key": "diamond_1", "value": "Gemstones"}},
                                    {"node": {"namespace": "custom", "key": "diamond_weight_1", "value": "2"}},
                                ]
                            },
                            "variants": {
                                "edges": [
                                    {
                                        "node": {
                                            "id": "gid://shopify/ProductVariant/11",
                                            "title": "18k Yellow Gold / 10%",
                                            "metafields": {
                                                "edges": [
                                                    {
                                                        "node": {
                                                            "namespace": "custom",
                                                            "key": "weight",
                                                            "value": '{"value": 5, "unit": "GRAMS"}',
                                                        }
                                                    }
                                                ]
                                            },
                                        }
                                    }
                                ]
                            },
                        }
                    }
                ]
            }
        }
    }


def test_graphql_connection_shape():
    products = parse_products(_graphql_payload())

    assert len(products) == 1
    product = products[0]
    assert product.id == "gid://shopify/Product/1"
    assert [(a.key, a.value) for a in product.attributes] == [("diamond_1", "Gemstones"), ("diamond_weight_1", "2")]
    assert len(product.variants) == 1
    variant = product.variants[0]
    assert variant.title == "18k Yellow Gold / 10%"
    assert variant.attributes[0].value == '{"value": 5, "unit": "GRAMS"}'
    assert variant.purity_tag is None


def test_plain_lists_and_structured_tags():
    payload = [
        {
            "id": "p1",
            "title": "Band",
            "attributes": [{"namespace": "custom", "key": "diamond_1", "value": None}],
            "variants": [
                {"id": "v1", "title": "Classic", "purityTag": " 22k ", "finish_tag": "Rose Gold", "discountTag": ""},
            ],
        }
    ]
    products = parse_products(payload)

    assert products[0].attributes[0].value == ""
    variant = products[0].variants[0]
    assert variant.purity_tag == "22k"
    assert variant.finish_tag == "Rose Gold"
    assert variant.discount_tag is None


def test_products_key_and_nodes_shape():
    payload = {"products": {"nodes": [{"id": "p1", "title": "Pendant"}, "junk"]}}
    products = parse_products(payload)

    assert [p.id for p in products] == ["p1"]
    assert products[0].variants == ()


def test_missing_product_id_raises():
    with pytest.raises(KeyError):
        parse_products([{"title": "No id"}])


def test_variant_update_payload():
    update = VariantPriceUpdate(variant_id="v1", price="63400.00", compare_at_price="66400.00")
    assert update.to_payload() == {"id": "v1", "price": "63400.00", "compareAtPrice": "66400.00"}
