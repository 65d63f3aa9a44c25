"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmount(DomainException):
    """A monetary string could not be parsed as a decimal amount"""

    def __init__(self, raw: object):
        super().__init__(f"Invalid monetary amount: {raw!r}")
        self.raw = raw


class ShopifyAPIError(DomainException):
    """Shopify Admin API returned an error or is unavailable"""

    pass


class ConfigurationError(DomainException):
    """Required configuration is missing"""

    pass


class MetafieldWriteError(DomainException):
    """One or more metafield batches reported errors"""

    def __init__(self, summary):
        super().__init__(
            f"Metafield update finished with errors: "
            f"{summary.applied_count} applied, {summary.error_count} failed"
        )
        self.summary = summary
