"""SealedFolio persistence layer.

Provides DuckDB-based storage for the three independently persisted
stores: the item collection, display settings and the catalog cache.
"""
