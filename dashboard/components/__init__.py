"""Dashboard widgets that hold live, non-snapshot state."""
