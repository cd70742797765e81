"""
CLI commands for Cloudwright.
"""

from cloudwright.cli.resources import create_command, delete_command, get_command
from cloudwright.cli.serve import serve_command

__all__ = [
    "create_command",
    "delete_command",
    "get_command",
    "serve_command",
]
