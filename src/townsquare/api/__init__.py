"""HTTP API for the Townsquare application."""
