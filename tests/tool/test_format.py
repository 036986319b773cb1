"""Tests for rendering Cluster listings."""

import io

from kratix_local.tool.format import ClusterTable, format_table


def test_format_table_empty() -> None:
    """Tests with no columns."""
    assert list(format_table([], [])) == []


def test_format_table_headers_only() -> None:
    """Tests with only headers."""
    assert list(format_table(["a", "b", "c"], [])) == ["a    b    c"]


def test_format_table_rows() -> None:
    """Tests columns are as wide as their widest cell."""
    assert list(
        format_table(["name", "namespace"], [["c1", "ns1"], ["worker", "default"]])
    ) == [
        "name      namespace",
        "c1        ns1",
        "worker    default",
    ]


def test_cluster_table_empty() -> None:
    """Nothing is printed without Clusters, not even headers."""
    assert list(ClusterTable(["name"]).lines([])) == []


def test_cluster_table_print() -> None:
    """Print the selected fields of each Cluster."""
    output = io.StringIO()
    ClusterTable(["name", "status"]).print(
        [
            {"name": "c1", "namespace": "ns1", "status": "Ready"},
            {"name": "worker", "namespace": "default", "status": "Pending"},
        ],
        file=output,
    )
    assert output.getvalue().splitlines() == [
        "NAME      STATUS",
        "c1        Ready",
        "worker    Pending",
    ]
