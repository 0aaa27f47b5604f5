"""
FastAPI RESTful API for the Bookworm book discovery backend.

This module provides a REST API for:
- Combined login-or-register with bearer tokens
- Book search proxied to Open Library
- Per-book reviews
- Per-user reading lists
"""
