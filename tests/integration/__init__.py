"""End-to-end hybrid search tests against the in-memory engine."""
