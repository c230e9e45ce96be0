"""Shared helpers used across repotune packages."""
