"""Core domain logic: chunking, enrichment, session state and exceptions."""
