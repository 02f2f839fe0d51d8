"""Shared test setup."""

import pymna  # noqa: F401  (enables 64-bit JAX before any test creates arrays)
