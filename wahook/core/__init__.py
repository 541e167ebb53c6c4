"""
wahook core components: configuration, logging, errors and task tracking.
"""
