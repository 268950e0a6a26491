"""Capacity, readiness, tag and deployment-group components."""
