"""Parse varnishlog output into transaction records."""
