"""
Command line interface for the expense assistant.
"""
