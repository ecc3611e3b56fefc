"""HTTP status codes and the reason phrases sent alongside them."""

HTTP_200 = 200
HTTP_301 = 301
HTTP_400 = 400
HTTP_401 = 401
HTTP_402 = 402
HTTP_403 = 403
HTTP_404 = 404
HTTP_405 = 405
HTTP_500 = 500
HTTP_501 = 501

REASON_PHRASES = {
    HTTP_200: "OK",
    HTTP_400: "Bad Request",
    HTTP_401: "Unauthorized",
    HTTP_402: "Payment Required",
    HTTP_403: "Forbidden",
    HTTP_404: "Not Found",
    HTTP_500: "Internal Server Error",
    HTTP_501: "Not Implemented",
}


def get_reason_phrase(status_code):
    """Returns the reason phrase for ``status_code``, or ``""`` when it has none."""
    return REASON_PHRASES.get(status_code, "")


def is_100(status_code):
    return 100 <= status_code <= 199


def is_200(status_code):
    return 200 <= status_code <= 299


def is_300(status_code):
    return 300 <= status_code <= 399


def is_400(status_code):
    return 400 <= status_code <= 499


def is_500(status_code):
    return 500 <= status_code <= 599
