from datetime import datetime, timezone

from bizscout.search.documents import (
    EMBEDDER_NAME,
    join_text,
    node_document,
    node_embedding_text,
    node_settings,
    property_document,
    property_embedding_text,
    property_settings,
    to_millis,
)


def _seed(store):
    favicon_id = store.add_media("https://acme.example/favicon.ico")
    prop_id = store.upsert_property(
        "acme.example",
        {"address1": "1 Main St", "city": "Grand Rapids", "state": "Michigan", "country": "USA"},
        favicon_id=favicon_id,
    )
    store.upsert_node(
        "https://acme.example",
        {"title": "Acme", "summary": "A roaster.", "keywords": ["coffee", "beans"], "industry": "Food & Beverage"},
        prop_id,
    )
    (prop,) = store.load_properties()
    (node,) = store.load_nodes()
    return prop, node


def test_settings_declare_user_provided_embedder():
    settings = node_settings(1536)
    assert "property.state" in settings["filterableAttributes"]
    assert settings["sortableAttributes"] == ["createdAt", "updatedAt"]
    assert settings["embedders"] == {EMBEDDER_NAME: {"source": "userProvided", "dimensions": 1536}}
    assert property_settings(None).get("embedders") is None
    assert property_settings()["filterableAttributes"] == ["city", "state", "country"]


def test_to_millis_treats_naive_as_utc():
    aware = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert to_millis(aware) == 1704067200000
    assert to_millis(aware.replace(tzinfo=None)) == 1704067200000
    assert to_millis(None) == 0


def test_join_text_skips_blanks():
    assert join_text(["a", None, "  ", "b "]) == "a b"


def test_embedding_texts(store):
    prop, node = _seed(store)
    assert property_embedding_text(prop) == "acme.example 1 Main St Grand Rapids Michigan USA"
    assert node_embedding_text(node) == "Acme A roaster. coffee beans Food & Beverage"


def test_empty_node_falls_back_to_url(store):
    prop_id = store.upsert_property("bare.example", {})
    store.upsert_node("https://bare.example", {}, prop_id)
    (node,) = store.load_nodes()
    assert node_embedding_text(node) == "https://bare.example"


def test_property_document_shape(store):
    prop, _ = _seed(store)
    doc = property_document(prop, [0.1, 0.2])

    assert doc["id"] == prop.id
    assert doc["hostname"] == "acme.example"
    assert doc["faviconUrl"] == "https://acme.example/favicon.ico"
    assert doc["ogImageUrl"] is None
    assert isinstance(doc["createdAt"], int)
    assert doc["_vectors"] == {EMBEDDER_NAME: [0.1, 0.2]}


def test_node_document_embeds_property(store):
    prop, node = _seed(store)
    doc = node_document(node)

    assert doc["propertyId"] == prop.id
    assert doc["propertyHostname"] == "acme.example"
    assert doc["property"]["state"] == "Michigan"
    assert doc["keywords"] == ["coffee", "beans"]
    assert doc["technologies"] == []
    assert "_vectors" not in doc
