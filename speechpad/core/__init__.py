"""Configuration, domain models and the exception hierarchy."""
