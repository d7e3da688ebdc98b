"""Services package for chatproxy."""
