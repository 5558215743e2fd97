"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
the tenancy, scoping, caching and household bounded contexts. Changes to this
module affect every context and should be carefully coordinated.

Following Domain-Driven Design principles, the Shared Kernel is a small,
carefully managed set of components that contexts agree to depend on:
error taxonomy, tenant and scope value objects, and the collaborator ports
(remote data service, identity provider, durable key-value store).
"""
