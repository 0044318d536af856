"""Command line interface for OpenBandi."""
