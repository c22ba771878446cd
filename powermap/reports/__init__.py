"""
powermap.reports — Tabular export of an assembled graph.

Modules:
    export — Header + one row per stakeholder, with a pandas CSV writer.
"""
