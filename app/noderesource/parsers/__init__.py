"""Parsers for host tool output."""
