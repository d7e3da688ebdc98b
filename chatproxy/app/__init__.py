"""chatproxy application package."""
