"""Search ranking and result fusion components.

This package contains fusion strategies that combine independently ranked
result lists (for example vector and full-text results) for hybrid search.

Contents
- ``fusion``: Reciprocal Rank Fusion and document identity helpers
"""
