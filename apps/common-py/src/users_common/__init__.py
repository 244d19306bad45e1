"""Shared domain, configuration and persistence code for the users API."""
