"""
Response providers: write a payload, a status code and raw headers to the
outbound :class:`~apiresponder.models.Response` in one wire format.

A provider is chosen once per request by :func:`get_provider`, from the
:class:`FormatMode` that :func:`resolve_format` derives from the ``format``
query parameter. Everything written to the response goes through the
:class:`ResponseProvider` interface.
"""

import abc
import enum
import logging

from .exceptions import ForbiddenError, ResponseSent
from .formats import encode_json, encode_xml
from .statics import DEFAULT_FORMAT, DEFAULT_STATUS_CODE

logger = logging.getLogger(__name__)


class FormatMode(enum.Enum):
    JSON = "json"
    XML = "xml"


def resolve_format(hint=DEFAULT_FORMAT):
    """Maps a format hint onto a :class:`FormatMode`.

    The match is case-insensitive; anything but ``"xml"`` (including ``None``
    and the empty string) resolves to :attr:`FormatMode.JSON`.
    """
    if isinstance(hint, str) and hint.lower() == FormatMode.XML.value:
        return FormatMode.XML
    return FormatMode.JSON


class ResponseProvider(abc.ABC):
    """Base class for sending data to the client in a given format.

    Subclasses implement :meth:`serialize` and set :attr:`mode` and :attr:`mimetype`.

    :param resp: The :class:`~apiresponder.models.Response` to write to.
    """

    mode: FormatMode
    mimetype: str

    def __init__(self, resp):
        self.resp = resp

    @abc.abstractmethod
    def serialize(self, data):
        """Returns ``data`` in this provider's wire format."""

    def write(self, data, status_code, headers=None):
        """Writes ``data``, the status code and the raw headers to the response.

        :param data: The payload to serialize.
        :param status_code: The HTTP status code; codes without a known
                            reason phrase are sent with an empty one.
        :param headers: Raw header strings, e.g. ``"Content-Range: items 0-9/42"``,
                        appended in order.
        """
        self.resp.status_code = status_code
        for header in headers or ():
            self.resp.add_header(header)
        self.resp.content = self.serialize(data)
        self.resp.mimetype = self.mimetype

    def send_data(self, data, status_code=DEFAULT_STATUS_CODE, headers=None):
        """Writes the response and ends request processing.

        Usage::

            provider.send_data(
                items,
                200,
                [f"Content-Range: items {offset}-{limit}/{total}"],
            )
        """
        self.write(data, status_code, headers)
        logger.debug(f"Sent {self.resp.status_line} as {self.mode.value}")
        raise ResponseSent()

    def write_error(self, status_code, message):
        self.write({"error": {"code": status_code, "message": message}}, status_code)

    def access_denied(self):
        """Ends the request with a 403 error, rendered in this provider's format."""
        raise ForbiddenError()


class JSONResponseProvider(ResponseProvider):
    mode = FormatMode.JSON
    mimetype = "application/json"

    def serialize(self, data):
        return encode_json(data)


class XMLResponseProvider(ResponseProvider):
    mode = FormatMode.XML
    mimetype = "application/xml"

    def serialize(self, data):
        return encode_xml(data)


PROVIDERS = {
    FormatMode.JSON: JSONResponseProvider,
    FormatMode.XML: XMLResponseProvider,
}


def get_provider(mode, resp):
    """Returns the provider for ``mode``, bound to ``resp``."""
    return PROVIDERS[mode](resp)
