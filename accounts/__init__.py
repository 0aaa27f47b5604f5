"""
Accounts package for the Bookworm backend.

This package contains:
- Credential store backed by MongoDB
- bcrypt password hashing
- Combined login-or-register authenticator
- Signed session token issuing and verification
"""

__version__ = "1.0.0"
