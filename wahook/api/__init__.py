"""
HTTP surface for the outbound actions.
"""
