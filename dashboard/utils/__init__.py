"""Small helpers shared by the dashboard package."""
