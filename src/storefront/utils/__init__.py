"""Shared utilities: configuration, logging, exceptions and helpers."""
