"""
powermap.graph — Stakeholder graph construction.

Modules:
    attributes  — Attribute Resolver with its schema-locator cache.
    builder     — Graph Assembly Pipeline and the networkx projection.
    demo        — Static demonstration graph used as the failure fallback.
"""
