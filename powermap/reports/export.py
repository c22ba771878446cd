"""
powermap/reports/export.py — Export Formatter.

Flattens an assembled NetworkGraph into spreadsheet rows: a header row, then
one row per stakeholder with its connection counts. export_rows() is pure;
write_csv() is the thin pandas layer the CLI uses to put rows on disk.
"""

import logging
from typing import IO, Any

import pandas as pd

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.models import NetworkGraph

logger = logging.getLogger(__name__)

EXPORT_HEADER = [
    "ID",
    "Name",
    "Type",
    "Subtype",
    "Influence",
    "Support",
    "Connections",
    "Strong Connections",
    "Notes",
]


def export_rows(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> list[list[Any]]:
    """
    Header row followed by one row per node, in node order.

    Connections counts every incident relationship; Strong Connections counts
    those with strength >= config.strong_strength_min.
    """
    connections = {node_id: 0 for node_id in graph.nodes}
    strong = {node_id: 0 for node_id in graph.nodes}
    for rel in graph.edges:
        for endpoint in {rel.source, rel.target}:
            if endpoint not in connections:
                continue
            connections[endpoint] += 1
            if rel.strength >= config.strong_strength_min:
                strong[endpoint] += 1

    rows: list[list[Any]] = [list(EXPORT_HEADER)]
    for node in graph.nodes.values():
        rows.append([
            node.id,
            node.name,
            node.category,
            node.sub_category,
            node.influence,
            node.support,
            connections[node.id],
            strong[node.id],
            node.notes or "",
        ])
    return rows


def rows_to_dataframe(rows: list[list[Any]]) -> pd.DataFrame:
    """DataFrame from export_rows() output (first row is the header)."""
    if not rows:
        return pd.DataFrame(columns=EXPORT_HEADER)
    return pd.DataFrame(rows[1:], columns=rows[0])


def write_csv(rows: list[list[Any]], path_or_buffer: str | IO[str]) -> None:
    df = rows_to_dataframe(rows)
    df.to_csv(path_or_buffer, index=False)
    logger.info("Exported %d stakeholder rows.", len(df))
