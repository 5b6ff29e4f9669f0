"""Services module - walk orchestration, service registry, local network info."""
