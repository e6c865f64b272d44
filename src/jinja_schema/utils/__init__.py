"""Shared tables and helpers."""
