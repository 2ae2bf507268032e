"""HTTP API for heightfield generation."""
