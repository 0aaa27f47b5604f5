"""
MongoDB connection management for the Bookworm backend.
"""
