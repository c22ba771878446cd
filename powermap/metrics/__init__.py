"""
powermap.metrics — Metrics over an assembled NetworkGraph.

Modules:
    statistics  — Dashboard counts, means, density, strong relationships.
    centrality  — Degree, betweenness (approximate or exact), closeness.
    influence   — Composite influence score and key-influencer ranking.
    structure   — Shortest path, clustering, diameter, communities.
    validation  — Data-quality audit of the contact store.

Every function recomputes from the graph it is given; nothing is cached
between calls.
"""
