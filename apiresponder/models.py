import logging
import typing as t
from urllib.parse import parse_qs

import chardet
import rfc3986
from requests.structures import CaseInsensitiveDict
from starlette.requests import Request as StarletteRequest
from starlette.requests import State
from starlette.responses import Response as StarletteResponse

from . import status_codes
from .formats import format_form
from .statics import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

FORM_MIMETYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class QueryDict(dict):
    def __init__(self, query_string):
        self.update(parse_qs(query_string))

    def __getitem__(self, key):
        """
        Return the last data value for this key, or [] if it's an empty list;
        raise KeyError if not found.
        """
        list_ = super().__getitem__(key)
        try:
            return list_[-1]
        except IndexError:
            return []

    def get(self, key, default=None):
        """
        Return the last data value for the passed key. If key doesn't exist
        or value is an empty list, return `default`.
        """
        try:
            val = self[key]
        except KeyError:
            return default
        if val == []:
            return default
        return val

    def get_list(self, key, default=None):
        """
        Return a copy of the list of values for the key. If key doesn't exist,
        return a default value.
        """
        try:
            values = super().__getitem__(key)
        except KeyError:
            return [] if default is None else default
        return list(values)

    def items(self):
        """
        Yield (key, value) pairs, where value is the last item in the list
        associated with the key.
        """
        for key in self:
            yield key, self[key]


class Request:
    __slots__ = [
        "_starlette",
        "_headers",
        "_encoding",
        "_content",
    ]

    def __init__(self, scope, receive):
        self._starlette = StarletteRequest(scope, receive)
        self._encoding = None
        self._content = None

        headers: CaseInsensitiveDict = CaseInsensitiveDict()
        for key, value in self._starlette.headers.items():
            headers[key] = value

        self._headers = headers

    @property
    def headers(self):
        """A case-insensitive dictionary, containing all headers sent in the Request."""
        return self._headers

    @property
    def mimetype(self):
        return self.headers.get("Content-Type", "")

    @property
    def method(self):
        """The incoming HTTP method used for the request, lower-cased."""
        return self._starlette.method.lower()

    @property
    def full_url(self):
        """The full URL of the Request, query parameters and all."""
        return str(self._starlette.url)

    @property
    def url(self):
        """The parsed URL of the Request."""
        return rfc3986.urlparse(self.full_url)

    @property
    def params(self):
        """A dictionary of the parsed query parameters used for the Request."""
        return QueryDict(self.url.query or "")

    @property
    def state(self) -> State:
        """
        Request-scoped storage, shared with the error handlers.

        Usage: ``request.state.format_mode = FormatMode.XML``
        """
        return self._starlette.state

    @property
    async def encoding(self):
        """The encoding of the Request's body. Can be set, manually. Must be awaited."""
        # Use the user-set encoding first.
        if self._encoding:
            return self._encoding

        return await self.apparent_encoding

    @encoding.setter
    def encoding(self, value):
        self._encoding = value

    @property
    async def content(self):
        """The raw Request body, as bytes. Must be awaited."""
        if self._content is None:
            self._content = await self._starlette.body()
        return self._content

    @property
    async def text(self):
        """The Request body, as unicode. Must be awaited."""
        return (await self.content).decode(await self.encoding)

    @property
    async def declared_encoding(self):
        if "Encoding" in self.headers:
            return self.headers["Encoding"]
        return None

    @property
    async def apparent_encoding(self):
        """The apparent encoding, provided by the chardet library. Must be awaited."""
        declared_encoding = await self.declared_encoding

        if declared_encoding:
            return declared_encoding

        return chardet.detect(await self.content)["encoding"] or DEFAULT_ENCODING

    async def post_fields(self):
        """The parsed form fields of a POST request, or an empty dict. Must be awaited."""
        if self.method != "post":
            return {}
        if not any(mimetype in self.mimetype for mimetype in FORM_MIMETYPES):
            return {}
        return await format_form(self)


def content_setter(mimetype):
    def getter(instance):
        return instance.content

    def setter(instance, value):
        instance.content = value
        instance.mimetype = mimetype

    return property(fget=getter, fset=setter)


class Response:
    __slots__ = [
        "status_code",
        "content",
        "encoding",
        "headers",
        "raw_headers",
        "mimetype",
    ]

    text = content_setter("text/plain")

    def __init__(self):
        #: The HTTP Status Code to use for the Response.
        self.status_code: t.Union[int, None] = None
        self.content = None  #: The response body, as bytes or unicode.
        self.mimetype = None
        self.encoding = DEFAULT_ENCODING
        self.headers = {}  #: A Python dictionary of ``{key: value}``,
        #: representing the headers of the response.
        self.raw_headers: t.List[str] = []  #: Raw ``"Name: value"`` header
        #: strings, sent verbatim and in order after ``headers``.

    @property
    def reason_phrase(self):
        """The reason phrase for the status code, ``""`` for codes without one."""
        return status_codes.get_reason_phrase(self.status_code_safe)

    @property
    def status_line(self):
        return f"{self.status_code_safe} {self.reason_phrase}".rstrip()

    def add_header(self, header):
        self.raw_headers.append(header)

    @property
    def body(self):
        headers = {}
        content = self.content
        if content is None:
            return b"", headers

        if self.mimetype is not None:
            if self.encoding is not None:
                headers["Content-Type"] = f"{self.mimetype}; charset={self.encoding}"
            else:
                headers["Content-Type"] = self.mimetype
        if isinstance(content, str):
            content = content.encode(self.encoding or DEFAULT_ENCODING)
        return content, headers

    def _prepare_raw_headers(self, starlette_response):
        for header in self.raw_headers:
            name, sep, value = header.partition(":")
            if not sep or not name.strip():
                logger.warning(f"Dropping malformed header: {header!r}")
                continue
            try:
                raw = (
                    name.strip().lower().encode("latin-1"),
                    value.strip().encode("latin-1"),
                )
            except UnicodeEncodeError:
                logger.warning(f"Dropping header that isn't latin-1: {header!r}")
                continue
            starlette_response.raw_headers.append(raw)

    async def __call__(self, scope, receive, send):
        body, headers = self.body
        if self.headers:
            headers.update(self.headers)

        response = StarletteResponse(
            body, status_code=self.status_code_safe, headers=headers
        )
        self._prepare_raw_headers(response)

        await response(scope, receive, send)

    @property
    def status_code_safe(self) -> int:
        if self.status_code is None:
            raise RuntimeError("HTTP status code has not been defined")
        return self.status_code
