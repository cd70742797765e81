"""Cloudwright: lifecycle orchestration for managed platform resources."""

__version__ = "0.1.0"
