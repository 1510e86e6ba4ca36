"""Paystub - payroll tax calculation and pay-period projection."""

__version__ = "0.1.0"
