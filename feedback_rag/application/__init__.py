"""Application layer: service orchestration."""
