"""Palate food-discovery API."""
