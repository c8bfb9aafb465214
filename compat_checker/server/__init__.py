"""
HTTP surface for host lifecycle events and compatibility status.
"""
