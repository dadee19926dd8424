"""Domain errors raised by the marketplace services."""


class MarketplaceError(Exception):
    """Base class for all domain errors."""


class NotFoundError(MarketplaceError):
    """A referenced product, quote or bundle does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidStateError(MarketplaceError):
    """An operation was attempted on a record in the wrong state."""


class QuoteExpiredError(InvalidStateError):
    """The quote's validity window has passed."""

    def __init__(self, quote_id):
        self.quote_id = quote_id
        super().__init__("Quote has expired")


class InvalidQuoteStatusError(InvalidStateError):
    """The quote is not pending or sent."""

    def __init__(self, quote_id, status: str, action: str = "accepted"):
        self.quote_id = quote_id
        self.status = status
        super().__init__(f"Quote cannot be {action} (status: {status})")
