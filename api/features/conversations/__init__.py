"""Conversations feature package: owned views onto the upstream Convai API.

Nothing about conversations is stored locally except which account claimed
which upstream id; listings and transcripts are fetched on demand and
filtered through the ownership registrar.
"""
