"""Caching bounded context.

Serves tenant-scoped collections from memory, the durable store or the
remote data service, and seeds empty collections from legacy data or
defaults exactly once.
"""
