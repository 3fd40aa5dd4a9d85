"""Search engine adapters.

Primary components:
- ``base``: abstract ``SearchEngine`` interface the orchestrator calls.
- ``memory``: brute-force in-memory implementation of the interface.

Guidance:
- Wrap a real dataset or search cluster by subclassing ``SearchEngine``;
  raise ``hybrid_search.errors.UpstreamSearchFailure`` subclasses for
  missing indexes or unknown columns.
"""
