"""
Command line interface for the address manager.
"""
