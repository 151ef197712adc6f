from fastapi import HTTPException, status

from src.tracker.domain.errors import AccessDenied, ChartLimitReached, CSVImportError, NotFound


def to_http(e: ValueError) -> HTTPException:
    """Maps domain errors raised by the services onto HTTP responses."""
    if isinstance(e, ChartLimitReached):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "Chart limit reached",
                "message": str(e),
                "current_count": e.count,
                "limit": e.limit,
                "upgrade_required": True,
            },
        )
    if isinstance(e, CSVImportError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": str(e),
                "details": e.errors,
                "total_rows": e.total_rows,
                "valid_rows": e.valid_rows,
            },
        )
    if isinstance(e, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, AccessDenied):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
