# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for crs.

This module collects the foundational helpers used across the crs codebase:
configuration, error types, structured logging and filesystem/YAML helpers.
"""
