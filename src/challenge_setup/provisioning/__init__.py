"""Template replication for candidate challenge repositories.

Provides:
- Settings loaded from .env
- Structured logging
- A GitHub hosting client (REST + git)
- The replicate / invite / transcribe procedure
"""
