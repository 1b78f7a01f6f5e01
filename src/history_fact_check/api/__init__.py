"""HTTP surface of the fact-check service."""
