"""HTTP server for the reconciliation service."""
