"""
CLI helper libraries.
"""
