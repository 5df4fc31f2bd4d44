"""
Script Narrator: long-form text to a single audio file via an asynchronous job pipeline.
"""
