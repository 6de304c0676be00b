"""Core services: extraction, aggregation and batch orchestration."""
