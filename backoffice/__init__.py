"""Kuppi back office."""
