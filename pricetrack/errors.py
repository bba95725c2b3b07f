class PriceTrackerError(Exception):
    """Base error; `status_code` is the HTTP status reported to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(PriceTrackerError):
    status_code = 400


class InvalidIdentifierError(PriceTrackerError):
    status_code = 400


class ProductNotFoundError(PriceTrackerError):
    status_code = 404


class ExtractionError(PriceTrackerError):
    pass


class UpstreamFetchError(PriceTrackerError):
    pass


class BlockedUpstreamError(UpstreamFetchError):
    pass


class ScraperUnavailableError(PriceTrackerError):
    pass


class PersistenceError(PriceTrackerError):
    pass
