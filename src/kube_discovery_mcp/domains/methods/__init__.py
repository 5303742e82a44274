"""Kubernetes client method catalog."""
