"""Security adapters: token signing, password hashing, opaque secrets."""
