"""Services package for the repository contributions API."""
