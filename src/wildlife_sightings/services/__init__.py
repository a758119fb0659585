"""
Shared service utilities.

- http.py - requests session with default timeout and single-attempt policy
"""
