"""Command line interface for mathparser."""
