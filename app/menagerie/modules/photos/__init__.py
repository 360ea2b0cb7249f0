"""
Photos module.

Uploaded images live in storage under `photos/`; the row keeps the storage key.
"""
