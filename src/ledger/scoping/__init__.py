"""Scoping bounded context.

Derives deterministic partition keys (tenant id plus time bucket) from
explicit input or ambient state.
"""
