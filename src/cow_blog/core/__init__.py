"""Core configuration for the blog engine."""
