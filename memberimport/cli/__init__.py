"""Command line tools for Member Import."""
