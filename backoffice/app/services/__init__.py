"""Domain services: identity verification and request validation."""
