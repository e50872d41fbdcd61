"""Read-only data sources: generated fixtures, audit constants and the insight catalog."""
