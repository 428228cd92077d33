"""
Currency Split - Source Package

Splits a bill evenly between participants who each pay in their own
currency.

DESIGN PRINCIPLES:
1. The calculation engine is pure: no I/O, no hidden state
2. Fail early with one clear message per attempt
3. Missing rates degrade the result, they never block it
4. Reference data is replaced wholesale, never half-updated
5. Every step is auditable
"""

__version__ = "1.0.0"
__author__ = "Currency Split Team"
