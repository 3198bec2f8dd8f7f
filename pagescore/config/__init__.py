"""Environment-driven application settings."""
