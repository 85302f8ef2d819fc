"""Packaged YAML templates."""
