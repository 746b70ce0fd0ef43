"""Command line interface for Atlas."""
