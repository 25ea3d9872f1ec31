"""LLM provider integrations."""
