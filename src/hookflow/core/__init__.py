"""Core components of the hookflow event-dispatch engine."""
