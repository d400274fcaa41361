"""
Projection clustering engine.

Groups 2-D projected points (one per entity and time unit) with DBSCAN,
K-Means or single-linkage hierarchical clustering.
"""

__version__ = "1.0.0"
