"""Endpoint modules for the REST interface."""
