"""Hybrid search components for vector + full-text ranking.

Includes the ``SearchManager`` which coordinates vector similarity and
full-text search against a ``SearchEngine`` and merges results with RRF.
"""
