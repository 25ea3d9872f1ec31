"""Infrastructure adapters: database, providers, cache and errors."""
