"""Integration adapters.

Adapters connect the drive service to external surfaces (HTTP today).
"""
