"""Command line tool for registering clusters with a local kratix platform."""
