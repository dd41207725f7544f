"""
services/ - Business Layer
==========================
Scheduling rules, invoice generation and the subscription/invoice workflows.
Services talk to a Store and return domain objects or display text.
"""
