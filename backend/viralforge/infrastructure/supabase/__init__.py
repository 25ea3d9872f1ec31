"""Supabase service-role integrations."""
