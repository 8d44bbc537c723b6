"""User account management service."""
