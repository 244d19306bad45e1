"""FastAPI service exposing CRUD operations over users."""
