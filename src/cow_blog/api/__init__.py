"""HTTP API for the blog engine."""
