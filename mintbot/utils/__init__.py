"""
Utility helpers for the mintbot package.
"""
