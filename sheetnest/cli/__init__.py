"""Command line interface for sheetnest."""
