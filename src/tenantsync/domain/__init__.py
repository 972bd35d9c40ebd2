"""Domain model, ports and services for tenant/device reconciliation."""
