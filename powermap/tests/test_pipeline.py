"""
powermap/tests/test_pipeline.py — Tests for the presentation-facing entry points.

Tests verify:
- get_network_data returns {nodes, edges, stats, metadata} with node and
  edge dicts in the documented shape.
- Request-style parameters (strings, comma lists) are parsed.
- get_network_analysis returns every section, even when one fails.
- The demo graph flows through every entry point when the store is down.
- export_network_rows / validate_network / list_relationship_types.
"""

import pytest

import powermap.pipeline as pipeline
from powermap.models import FilterCriteria
from powermap.pipeline import (
    export_network_rows,
    get_network_analysis,
    get_network_data,
    list_relationship_types,
    validate_network,
)


def test_network_data_shape(sample_store):
    data = get_network_data(sample_store, {"group_id": "10"})
    assert set(data) == {"nodes", "edges", "stats", "metadata"}
    assert len(data["nodes"]) == 7
    assert len(data["edges"]) == 5

    alice = next(n for n in data["nodes"] if n["id"] == 1)
    assert alice == {
        "id": 1,
        "name": "Alice Moreno",
        "type": "Individual",
        "subtype": "",
        "influence": 5,
        "support": 4,
        "group": "high",
        "notes": "Board chair",
    }
    edge = next(e for e in data["edges"] if e["id"] == 2)
    assert edge == {
        "id": 2, "source": 2, "target": 3, "type": "Advisor", "type_id": 2, "strength": 3,
    }
    assert data["stats"]["total"] == 7
    assert data["metadata"]["is_demo_data"] is False


def test_request_params_are_parsed(sample_store):
    data = get_network_data(
        sample_store,
        {"contact_id": "1,3", "relationship_types": "1", "only_relationship": "1"},
    )
    assert {n["id"] for n in data["nodes"]} == {1, 2, 3}
    assert {e["id"] for e in data["edges"]} == {1, 3, 7}
    assert data["metadata"]["filters_applied"]["entity_ids"] == [1, 3]


def test_accepts_filter_criteria(sample_store):
    data = get_network_data(sample_store, FilterCriteria(entity_ids=(7,)))
    assert [n["id"] for n in data["nodes"]] == [7]


def test_network_data_demo_fallback(unreachable_store):
    data = get_network_data(unreachable_store, {"group_id": 10})
    assert len(data["nodes"]) == 5
    assert len(data["edges"]) == 5
    assert data["metadata"]["is_demo_data"] is True
    assert data["stats"]["total"] == 5


def test_analysis_sections(sample_store):
    result = get_network_analysis(sample_store, {"group_id": 10})
    assert set(result) == {
        "network_data", "centrality_measures", "key_influencers",
        "network_statistics", "analysis_metadata",
    }
    assert set(result["centrality_measures"]) == {1, 2, 3, 4, 5, 6, 7}
    assert result["key_influencers"][0]["contact_id"] == 1
    assert result["network_statistics"]["total_nodes"] == 7

    meta = result["analysis_metadata"]
    assert meta["total_nodes_analyzed"] == 7
    assert meta["total_edges_analyzed"] == 5
    assert meta["is_demo_data"] is False
    assert meta["filters_applied"]["group_id"] == 10


def test_analysis_influencer_limit(sample_store):
    result = get_network_analysis(sample_store, {"group_id": 10}, influencer_limit=2)
    assert [k["contact_id"] for k in result["key_influencers"]] == [1, 3]


def test_failing_section_is_replaced_by_empty_shape(sample_store, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise ValueError("numerical failure")

    monkeypatch.setattr(pipeline, "compute_centrality_measures", boom)
    with caplog.at_level("WARNING"):
        result = get_network_analysis(sample_store, {"group_id": 10})

    assert result["centrality_measures"] == {}
    assert len(result["key_influencers"]) == 7
    assert result["network_statistics"]["total_nodes"] == 7
    assert "centrality_measures" in caplog.text


def test_analysis_on_demo_graph(unreachable_store):
    result = get_network_analysis(unreachable_store)
    assert result["analysis_metadata"]["is_demo_data"] is True
    assert result["analysis_metadata"]["total_nodes_analyzed"] == 5
    assert len(result["centrality_measures"]) == 5


def test_analysis_on_empty_graph(sample_store):
    result = get_network_analysis(sample_store, FilterCriteria(entity_ids=()))
    assert result["centrality_measures"] == {}
    assert result["key_influencers"] == []
    assert result["network_statistics"]["total_nodes"] == 0


def test_export_network_rows(sample_store):
    rows = export_network_rows(sample_store, {"group_id": 10})
    assert rows[0][0] == "ID"
    assert len(rows) == 8


def test_validate_network(sample_store):
    report = validate_network(sample_store)
    assert report["critical_issues"] == 1
    assert report["data_quality_score"] == pytest.approx(84.0)


def test_list_relationship_types(sample_store):
    types = list_relationship_types(sample_store)
    assert [t["id"] for t in types] == [1, 2, 3]
    assert types[1]["label"] == "Advisor"


def test_list_relationship_types_store_down(unreachable_store):
    assert list_relationship_types(unreachable_store) == []
