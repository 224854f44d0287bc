"""
Barista error taxonomy.

Every error carries the line that is sent back to the client that caused it.
NoActiveOrder and NothingReady are informational outcomes rather than
failures, but travel the same way so the connection handler maps all of them
in one place.
"""

from typing import Optional


class BaristaError(Exception):
    """Base class for errors reported to a single client."""

    default_message = "Something went wrong. Please retry."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidOrder(BaristaError):
    """Bad quantity, unknown drink or malformed order command. Nothing was queued."""

    default_message = "Error! Invalid order format. Please retry."


class DuplicateIdentity(BaristaError):
    """The requested name belongs to a client that is still connected."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Error! The name {identity} is already in use.")


class UnknownCustomer(BaristaError):
    """The order names a customer without an active session."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"Error! {owner} is not a customer of this cafe.")


class OrderTooLarge(InvalidOrder):
    """More drinks in one order than the counter accepts."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Error! At most {limit} items can be ordered at once. Please retry.")


class NoActiveOrder(BaristaError):
    """The client has nothing waiting, preparing or ready."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"No order found for {owner}")


class NothingReady(BaristaError):
    """The client asked to collect but nothing of theirs is ready yet."""

    default_message = (
        "We are still brewing up love for you ;) - "
        "Please check the status again in a bit."
    )


class ProcessShutdown(BaristaError):
    """The cafe is closing; preparation has stopped and no new orders are taken."""

    default_message = "Sorry, the cafe is closing. No new orders are accepted."
