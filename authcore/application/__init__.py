"""Application layer: authentication use cases."""
