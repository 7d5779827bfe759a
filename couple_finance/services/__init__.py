"""Services package: record storage and the household repository."""
