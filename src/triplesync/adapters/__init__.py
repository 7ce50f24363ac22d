"""Adapters connecting the sync core to external systems."""
