"""Paystub CLI."""
