"""Cross-cutting infrastructure: configuration, logging and collaborator adapters."""
