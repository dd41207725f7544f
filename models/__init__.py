"""
models/ - Domain Layer
======================
Plain dataclasses for subscriptions and invoices, plus their status
and frequency constants. No I/O lives here.
"""
