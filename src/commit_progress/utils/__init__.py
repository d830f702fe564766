"""Configuration and cost helpers."""
