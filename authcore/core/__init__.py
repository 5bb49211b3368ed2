"""Core package: cross-cutting primitives shared by every layer."""
