"""Domain types and business rules."""
