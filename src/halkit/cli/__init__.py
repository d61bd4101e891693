"""Command line interface for halkit."""
