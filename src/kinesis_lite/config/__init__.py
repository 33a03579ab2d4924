"""Settings and AWS session bootstrap."""
