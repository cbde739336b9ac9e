from bizscout.search.documents import NODES_INDEX, PROPERTIES_INDEX
from bizscout.search.sync import IndexSyncEngine
from conftest import FakeEmbedder, FakeIndex


def _engine(store, index, embedder, **kwargs):
    kwargs.setdefault("embedding_dimensions", 3)
    return IndexSyncEngine(store, index, embedder, **kwargs)


def _properties(store, n):
    for i in range(n):
        store.ensure_property(f"site{i:02d}.example")
    return store.load_properties()


def test_setup_indexes_creates_then_reconfigures(store, fake_index, embedder):
    engine = _engine(store, fake_index, embedder)
    engine.setup_indexes()
    engine.setup_indexes()

    assert set(fake_index.indexes) == {PROPERTIES_INDEX, NODES_INDEX}
    assert fake_index.settings[NODES_INDEX]["embedders"]["default"]["dimensions"] == 3


def test_only_unseen_ids_are_embedded_and_sent(store, embedder):
    props = _properties(store, 10)
    index = FakeIndex()
    index.create_index(PROPERTIES_INDEX)
    for p in props[:7]:
        index.indexes[PROPERTIES_INDEX][p.id] = {"id": p.id}

    result = _engine(store, index, embedder, batch_size=2, page_size=3).sync_properties()

    assert result.existing == 7
    assert result.source == 10
    assert result.pending == 3
    assert result.synced == 3
    assert result.batches == 2
    assert embedder.calls == 3
    assert [c["count"] for c in index.add_calls] == [2, 1]
    assert set(index.indexes[PROPERTIES_INDEX]) == {p.id for p in props}


def test_rerun_without_new_records_is_a_no_op(store, fake_index, embedder):
    _properties(store, 4)
    engine = _engine(store, fake_index, embedder, batch_size=3)

    first = engine.run()
    assert first.results[PROPERTIES_INDEX].synced == 4
    embeds, adds = embedder.calls, len(fake_index.add_calls)

    second = engine.run()
    assert second.ok
    assert second.results[PROPERTIES_INDEX].pending == 0
    assert embedder.calls == embeds
    assert len(fake_index.add_calls) == adds
    assert second.documents == {PROPERTIES_INDEX: 4, NODES_INDEX: 0}


def test_documents_carry_vectors_in_input_order(store, fake_index):
    _properties(store, 5)
    embedder = FakeEmbedder()
    _engine(store, fake_index, embedder, batch_size=5, embed_workers=4).sync_properties()

    for doc in fake_index.indexes[PROPERTIES_INDEX].values():
        assert doc["_vectors"]["default"][0] == float(len(doc["hostname"]))


def test_nodes_are_synced_with_their_property(store, fake_index, embedder):
    prop_id = store.upsert_property("acme.example", {"city": "Grand Rapids"})
    node_id = store.upsert_node("https://acme.example", {"title": "Acme"}, prop_id)

    report = _engine(store, fake_index, embedder).run()

    assert report.ok
    doc = fake_index.indexes[NODES_INDEX][node_id]
    assert doc["property"]["city"] == "Grand Rapids"
    assert doc["propertyHostname"] == "acme.example"


def test_failed_batch_stops_that_index_only(store, embedder):
    _properties(store, 5)
    prop_id = store.get_property("site00.example").id
    store.upsert_node("https://site00.example", {"title": "Site"}, prop_id)
    index = FakeIndex(fail_add_on_call=2)

    report = _engine(store, index, embedder, batch_size=2).run()

    assert not report.ok
    props = report.results[PROPERTIES_INDEX]
    assert props.synced == 2
    assert props.batches == 1
    assert "batch 2" in props.error
    # first batch stays indexed; nodes still synced
    assert len(index.indexes[PROPERTIES_INDEX]) == 2
    assert report.results[NODES_INDEX].synced == 1
    assert report.results[NODES_INDEX].error is None


def test_embedding_failure_sends_nothing_for_the_batch(store, fake_index):
    _properties(store, 2)
    embedder = FakeEmbedder(fail_on="site01")

    report = _engine(store, fake_index, embedder, batch_size=10).run()

    assert report.results[PROPERTIES_INDEX].synced == 0
    assert "embedding backend unavailable" in report.results[PROPERTIES_INDEX].error
    assert fake_index.add_calls == []
    assert report.as_dict()["ok"] is False
