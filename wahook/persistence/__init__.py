"""
In-process state kept by wahook.
"""
