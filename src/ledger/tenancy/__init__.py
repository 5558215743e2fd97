"""Tenancy bounded context.

Discovers the caller's household (tenant) id exactly once per session and
clears it again on sign-out or identity switch.
"""
