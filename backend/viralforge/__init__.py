"""ViralForge AI backend."""
