"""API routers (versioned)."""
