"""Find and purge files matching include/exclude glob rules."""
