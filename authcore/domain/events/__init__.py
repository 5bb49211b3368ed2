"""Domain events package."""
