"""
Synthesis pipeline services.
"""
