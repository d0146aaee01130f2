"""Custom exception classes."""

from fastapi import HTTPException, status


class LandguardException(HTTPException):
    """Base exception for application errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str = "LANDGUARD_ERROR",
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


class InvalidGeoJSONError(LandguardException):
    def __init__(self, errors: list[str]):
        self.errors = errors
        detail = f"GeoJSON rejected with {len(errors)} error(s): {'; '.join(errors[:5])}"
        if len(errors) > 5:
            detail += f" ... and {len(errors) - 5} more"
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code="INVALID_GEOJSON",
        )


class CorpusUnavailableError(LandguardException):
    def __init__(self, detail: str = "Parcel corpus is unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            code="CORPUS_UNAVAILABLE",
        )


class ListingNotFoundError(LandguardException):
    def __init__(self, listing_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Listing not found: {listing_id}",
            code="LISTING_NOT_FOUND",
        )
