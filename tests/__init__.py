"""Tests for hybrid search components.

Unit tests cover rank fusion, the search manager, the in-memory engine, and
the common configuration and metrics helpers. End-to-end runs against the
in-memory engine live under ``integration``.
"""
