from starlette.exceptions import HTTPException

from . import status_codes
from .statics import ACCESS_DENIED_MESSAGE


class ResponseSent(Exception):
    """Raised once a response provider has written the response.

    The route catches it and sends the response, so no handler code
    after ``send_data`` runs.
    """


class ForbiddenError(HTTPException):
    def __init__(self, detail=ACCESS_DENIED_MESSAGE, headers=None):
        super().__init__(
            status_code=status_codes.HTTP_403, detail=detail, headers=headers
        )
