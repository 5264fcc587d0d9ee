"""Business logic services for the blog engine."""
