"""
Read-only warehouse access.
"""
