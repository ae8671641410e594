"""Balancing diagnostics for seed data."""
