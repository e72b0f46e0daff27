"""Core building blocks: errors, capability probe, lazy handles, hashing."""
