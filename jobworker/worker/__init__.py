"""
Worker: handler registry and message processing.
"""
