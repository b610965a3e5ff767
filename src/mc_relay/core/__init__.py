"""Relay core: in-memory tables and the dispatch and linking flows."""
