"""Command line helpers for tuning and checking trail data."""
