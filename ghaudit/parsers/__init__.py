"""Parsers for workflow documents and embedded expressions."""
