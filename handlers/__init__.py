"""
handlers/ - Presentation Layer
================================
Telegram command handlers for invoices and recurring payments. Each handler
parses the command arguments, calls a Service, and replies with the result.
Validation and scheduling live in the services, not here.
"""
