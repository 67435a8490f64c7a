"""HTTP layer for the Contact List service."""
