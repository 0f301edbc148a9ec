"""Command line interface for the inference client."""
