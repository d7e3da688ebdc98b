"""Backend-for-frontend for a Venice.ai chat application."""
