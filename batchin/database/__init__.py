"""Catalog entities, row mapping and read-only queries."""
