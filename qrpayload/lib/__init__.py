"""Core library: secret normalization, envelope codec and collaborator adapters."""
