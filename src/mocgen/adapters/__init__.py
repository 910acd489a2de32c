"""Filesystem and YAML implementations of the core ports."""
