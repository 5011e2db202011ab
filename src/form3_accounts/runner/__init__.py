"""
CLI runner module.

Provides commands:
- init: Write a default config file
- get: Fetch one account
- create: Create an account
- delete: Delete an account
- list: List accounts, optionally following every page
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
