"""Omnipply application portal API."""
