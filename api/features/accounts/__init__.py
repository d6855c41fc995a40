"""Accounts feature package: the user directory.

Holds Account records and the conversation ids each account has claimed,
plus the ownership registrar that reads and appends those claims.
"""
