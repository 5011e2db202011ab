"""
Form3 Accounts API client.

A small, synchronous client for the account resource of the Form3
financial-accounts REST API: fetch, create, delete and paginated listing,
with typed JSON:API envelopes and an explicit error taxonomy.
"""

__version__ = "0.1.0"
