import pytest

from bizscout.errors import ValidationError
from bizscout.search.query import MAX_LIMIT, SearchRequest, build_filter, search
from conftest import FakeEmbedder, FakeIndex


def test_missing_query_never_reaches_the_index():
    index, embedder = FakeIndex(), FakeEmbedder()
    with pytest.raises(ValidationError, match="'q' is required"):
        search({"q": "  ", "vector": "true"}, index, embedder)
    assert index.search_calls == []
    assert embedder.calls == 0


def test_invalid_type_is_rejected():
    with pytest.raises(ValidationError, match="Must be 'nodes' or 'properties'"):
        SearchRequest.from_params({"q": "coffee", "type": "media"})


@pytest.mark.parametrize("params", [{"limit": "abc"}, {"limit": "0"}, {"offset": "-1"}])
def test_bad_pagination_is_rejected(params):
    with pytest.raises(ValidationError):
        SearchRequest.from_params({"q": "coffee", **params})


def test_defaults_and_limit_cap():
    req = SearchRequest.from_params({"q": "coffee"})
    assert (req.type, req.limit, req.offset, req.vector) == ("nodes", 20, 0, False)
    assert SearchRequest.from_params({"q": "coffee", "limit": "5000"}).limit == MAX_LIMIT


def test_node_filters_target_the_embedded_property():
    req = SearchRequest.from_params({"q": "shop", "industry": "Retail", "state": "Michigan"})
    assert build_filter(req) == 'industry = "Retail" AND property.state = "Michigan"'


def test_property_filters_are_top_level():
    req = SearchRequest.from_params({"q": "shop", "type": "properties", "city": "Grand Rapids"})
    assert build_filter(req) == 'city = "Grand Rapids"'


def test_industry_filter_not_supported_on_properties():
    with pytest.raises(ValidationError, match="industry"):
        SearchRequest.from_params({"q": "shop", "type": "properties", "industry": "Retail"})


def test_filter_values_are_quoted():
    req = SearchRequest.from_params({"q": "x", "city": 'Say "hi"'})
    assert build_filter(req) == 'property.city = "Say \\"hi\\""'
    assert build_filter(SearchRequest.from_params({"q": "x"})) is None


def test_keyword_search_does_not_embed():
    index, embedder = FakeIndex(), FakeEmbedder()
    result = search({"q": "coffee", "limit": "10", "offset": "20"}, index, embedder)

    assert embedder.calls == 0
    (call,) = index.search_calls
    assert call["uid"] == "nodes"
    assert call["limit"] == 10
    assert call["offset"] == 20
    assert call["filter"] is None
    assert "hybrid" not in call
    assert result["hits"] == [{"id": "n1"}]
    assert result["estimatedTotalHits"] == 1


def test_vector_search_embeds_the_query_first():
    index, embedder = FakeIndex(), FakeEmbedder()
    search({"q": "coffee", "vector": "TRUE", "type": "properties"}, index, embedder, semantic_ratio=0.7)

    assert embedder.texts == ["coffee"]
    (call,) = index.search_calls
    assert call["uid"] == "properties"
    assert call["vector"] == [6.0, 0.0, 0.0]
    assert call["hybrid"] == {"semanticRatio": 0.7, "embedder": "default"}


def test_vector_flag_only_accepts_true():
    assert SearchRequest.from_params({"q": "x", "vector": "1"}).vector is False


def test_vector_search_without_embedder_is_a_validation_error():
    with pytest.raises(ValidationError):
        search({"q": "coffee", "vector": "true"}, FakeIndex(), None)
