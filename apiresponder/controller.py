import logging
from collections.abc import Mapping

from requests_toolbelt.multipart.decoder import (
    ImproperBodyPartContentException,
    NonMultipartContentTypeException,
)

from .formats import decode_form, decode_json
from .providers import ResponseProvider, get_provider, resolve_format
from .statics import DEFAULT_FORMAT, DEFAULT_STATUS_CODE, FORMAT_PARAM

logger = logging.getLogger(__name__)

FORM_ERRORS = (
    ValueError,
    LookupError,
    AttributeError,
    ImproperBodyPartContentException,
    NonMultipartContentTypeException,
)


class Controller:
    """The base API controller.

    Subclass it and register it as a route; it's constructed once per request,
    with the request and the response, and resolves its response provider
    from the ``format`` query parameter right away.

    Usage::

        @api.route("/items")
        class Items(Controller):
            async def on_post(self, req, resp):
                params = await self.input_params()
                self.send_data({"created": params}, 200)
    """

    #: The status code used by :meth:`send_data` when none is given.
    status_code = DEFAULT_STATUS_CODE
    #: The query parameter holding the format hint.
    format_param = FORMAT_PARAM
    default_format = DEFAULT_FORMAT

    def __init__(self, req, resp):
        self.req = req
        self.resp = resp

        mode = resolve_format(req.params.get(self.format_param, self.default_format))
        logger.debug(f"Resolved response format: {mode.value}")

        # Error handlers render in the same format.
        req.state.format_mode = mode
        self._response_provider = get_provider(mode, resp)

    @property
    def response_provider(self):
        return self._response_provider

    @response_provider.setter
    def response_provider(self, provider):
        if not isinstance(provider, ResponseProvider):
            raise TypeError(
                f"Expected a ResponseProvider, got {type(provider).__name__}"
            )
        self.req.state.format_mode = provider.mode
        self._response_provider = provider

    async def input_params(self):
        """The request body, as a dict. Must be awaited.

        JSON is tried first, then urlencoded form data, then the form fields
        of a POST request. Never raises; an unparseable body gives ``{}``.
        """
        text = ""
        # Multipart bodies are only readable as POST fields.
        if "multipart/form-data" not in self.req.mimetype:
            try:
                text = await self.req.text
            except (UnicodeDecodeError, LookupError) as ex:
                logger.debug(f"Undecodable request body: {ex}")

        if text:
            try:
                result = decode_json(text)
            except (ValueError, RecursionError):
                result = None
            if isinstance(result, Mapping):
                return dict(result)

            result = decode_form(text)
            if result:
                return result

        try:
            return dict(await self.req.post_fields())
        except FORM_ERRORS as ex:
            logger.debug(f"Unable to parse POST fields: {ex}")
            return {}

    def send_data(self, data, status_code=None, headers=None):
        """Sends ``data`` in the resolved format and ends request processing.

        :param data: The payload to serialize.
        :param status_code: Defaults to :attr:`status_code`.
        :param headers: Raw header strings, sent verbatim and in order.
        """
        if status_code is None:
            status_code = self.status_code
        self.response_provider.send_data(data, status_code, headers)

    def access_denied(self):
        """Ends the request with a 403 "access denied" error."""
        self.response_provider.access_denied()
