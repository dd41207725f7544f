"""
utils/errors.py
---------------
Exceptions shared across the service and repository layers.
"""


class ValidationError(ValueError):
    """
    User input failed validation.

    Attributes:
        errors: Mapping of field name -> human-readable message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class NotFoundError(LookupError):
    """A subscription or invoice id does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class ConcurrentUpdateError(RuntimeError):
    """A conditional replace lost against a concurrent writer."""

    def __init__(self, subscription_id: str, expected_version: int):
        self.subscription_id = subscription_id
        self.expected_version = expected_version
        super().__init__(
            f"Subscription {subscription_id} changed since it was read "
            f"(expected version {expected_version})"
        )
