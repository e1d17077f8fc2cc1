"""
DivvyPlan Kernel

Foundations for the deal-to-dividends planning engine:
- Integer-pence money helpers with a single rounding mode
- Immutable, self-validating value objects
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
