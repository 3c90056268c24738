"""
HTTP console for ipdesk.
"""
