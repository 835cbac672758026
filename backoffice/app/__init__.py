"""Back office application package."""
