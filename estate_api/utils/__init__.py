"""
Shared helpers: token handling, exceptions, request dependencies and file storage.
"""
