"""
MeliDash Package

Backend for the MeliDash marketplace seller dashboard.
Runs pricing-rule automation (conditions → actions → guard rails → price update)
and serves the trends, reputation, AI assistant, admin and auth services.
"""

__version__ = "1.0.0"
