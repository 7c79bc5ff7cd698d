"""JSON API for the EMI calculator."""
