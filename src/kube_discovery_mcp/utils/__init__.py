"""Shared utilities for the discovery server."""
