"""Services for listing categorization."""
