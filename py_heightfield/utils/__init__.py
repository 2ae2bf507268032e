"""Helpers shared by the API and scripts."""
