"""
HTTP exceptions raised by the API layer
"""

from fastapi import HTTPException, status


class InternalServerError(HTTPException):
    """Internal server error exception"""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )
