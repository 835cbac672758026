"""Resource store: ORM models, sessions and CRUD operations."""
