"""Kubernetes type declarations and property path navigation."""
