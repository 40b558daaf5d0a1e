"""Clients for hosted services (cache, images)."""
