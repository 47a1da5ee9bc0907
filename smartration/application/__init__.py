"""Application workflows composed from parsing and runtime services."""
