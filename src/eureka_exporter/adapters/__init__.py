"""I/O adapters implementing core ports."""
