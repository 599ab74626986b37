"""Boundary layer: adapters for external providers."""
