"""Ranked, faceted search over the method catalog."""
