"""Error taxonomy for price lookups and conversions."""


class PriceMonitorError(Exception):
    """Base error for the price monitor."""

    status_code = 500


class InvalidParameter(PriceMonitorError):
    """Raised when a caller supplies a missing or malformed parameter."""

    status_code = 400


class UpstreamError(PriceMonitorError):
    """Raised when an upstream service fails, times out, or rate limits."""


class NoData(UpstreamError):
    """Raised when the upstream returns no data points at all."""


class InsufficientData(UpstreamError):
    """Raised when there are too few data points to compute a change."""


class ConversionError(PriceMonitorError):
    """Base error for unit and currency conversion."""


class UnsupportedUnit(ConversionError, InvalidParameter):
    """Raised for a unit missing from the conversion table."""

    status_code = 400


class RateUnavailable(ConversionError):
    """Raised when the FX service has no rate for the target currency."""
