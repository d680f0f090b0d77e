"""jokevault — fetch, deduplicate, and store jokes from a remote API."""
