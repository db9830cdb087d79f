# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Error types raised by LIE-JIT.

Every failure is surfaced to the caller immediately; nothing in the library
retries or recovers. The classes also derive from the matching builtin so
callers catching ``ValueError`` / ``TypeError`` / ``NotImplementedError``
keep working.
"""

from __future__ import annotations


class LieJitError(Exception):
    """Root of all LIE-JIT errors."""


class CurvePreconditionError(LieJitError, ValueError):
    """Malformed input to a curve-fitting routine (raised before any work)."""


class JacobianNotImplementedError(LieJitError, NotImplementedError):
    """A Jacobian output was requested that the group does not provide."""


class IncompatibleGroupError(LieJitError, TypeError):
    """Two elements of different concrete groups were combined."""
