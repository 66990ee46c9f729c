"""Console client for the task tracker API."""
