"""Example resources and consumers for borrowkit.

This package demonstrates library usage but is not part of the core API.
"""
