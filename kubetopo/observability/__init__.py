"""Logging and metrics for KubeTopo."""
