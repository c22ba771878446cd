"""
powermap — Stakeholder power map: graph assembly and network analytics.

Builds a stakeholder-relationship graph from a contact & relationship store
and computes structural metrics over it for a network-visualization UI and
CSV export.

Components:
- Attribute Resolver       (powermap.graph.attributes)
- Graph Assembly Pipeline  (powermap.graph.builder)
- Statistics Calculator    (powermap.metrics.statistics)
- Network Analytics        (powermap.metrics.centrality, .influence, .structure)
- Export Formatter         (powermap.reports.export)

Entry points for callers live in powermap.pipeline.
"""

__version__ = "0.1.0"
