"""Cleaning checklist service - Backend.

- Email/password accounts with stateless JWT bearer tokens.
- Checklist items per facility, each a row of boolean cleaning statuses
  toggled one field at a time.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
