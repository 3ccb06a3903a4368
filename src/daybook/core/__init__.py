"""Core infrastructure: config, secrets, exceptions, storage, logging."""
