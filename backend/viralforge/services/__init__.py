"""Application services: entitlement checks and scheduled jobs."""
