"""
Core infrastructure: configuration, paths, logging, exceptions,
validators and result types.
"""
