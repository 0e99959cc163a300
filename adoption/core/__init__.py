"""
Core utilities shared across the adoption system.

This package hosts:
- configuration helpers (env vars, data paths, feature flags)
- the error hierarchy used by repositories/services and the CLI
- cross-cutting helpers such as logging setup and password hashing

Repositories and services should depend on these primitives instead of
reading os.environ or printing directly.
"""
