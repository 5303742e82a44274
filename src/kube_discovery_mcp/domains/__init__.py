"""Domain modules for the discovery server."""
