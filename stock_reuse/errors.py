# stock_reuse/errors.py
# Error taxonomy. "No feasible candidate" is not an error: selectors return None.

from __future__ import annotations


class InputError(ValueError):
    """Malformed input columns (length mismatch, duplicate stock id, bad value)."""


class InvariantViolation(RuntimeError):
    """Selection-logic defect: negative leftover, double assignment, bad attribution."""
