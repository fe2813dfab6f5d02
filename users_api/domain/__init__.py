"""Pure domain rules for user records, free of HTTP and storage concerns."""
