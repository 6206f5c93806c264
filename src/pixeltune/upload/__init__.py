"""Upload endpoint."""
