"""
Core rule definitions, checks and catalog management.
"""
