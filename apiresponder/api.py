import logging
import os

import uvicorn
from starlette.exceptions import HTTPException
from starlette.middleware.errors import ServerErrorMiddleware
from starlette.middleware.exceptions import ExceptionMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.testclient import TestClient

from . import status_codes
from .models import Response
from .providers import get_provider, resolve_format
from .routes import Router
from .statics import DEFAULT_FORMAT, FORMAT_PARAM

logger = logging.getLogger(__name__)


class API:
    """The primary web-service class.

    :param debug: If ``True``, unhandled errors render a traceback page.
    :param allowed_hosts: Host names to accept requests for; defaults to any.
    """

    status_codes = status_codes

    def __init__(self, *, debug=False, allowed_hosts=None):
        self.router = Router()
        self.debug = debug

        if not allowed_hosts:
            allowed_hosts = ["*"]
        self.allowed_hosts = allowed_hosts

        # Cached requests session.
        self._session = None

        self.app = ExceptionMiddleware(
            self.router,
            handlers={HTTPException: self.handle_http_exception},
            debug=debug,
        )
        self.add_middleware(GZipMiddleware)
        self.add_middleware(TrustedHostMiddleware, allowed_hosts=self.allowed_hosts)
        self.add_middleware(ServerErrorMiddleware, debug=debug)

        self.requests = (
            self.session()
        )  #: A Requests session that is connected to the ASGI app.

    def add_middleware(self, middleware_cls, **middleware_config):
        self.app = middleware_cls(self.app, **middleware_config)

    def handle_http_exception(self, request, exc):
        """Renders an HTTP error in the request's response format.

        The format resolved by the request's controller is used when there
        is one; otherwise it's resolved from the query string.
        """
        mode = getattr(request.state, "format_mode", None)
        if mode is None:
            mode = resolve_format(request.query_params.get(FORMAT_PARAM, DEFAULT_FORMAT))

        resp = Response()
        get_provider(mode, resp).write_error(exc.status_code, exc.detail)
        if exc.headers:
            resp.headers.update(exc.headers)

        logger.debug(f"{request.method} {request.url.path}: {resp.status_line}")
        return resp

    def add_route(self, route=None, endpoint=None, *, default=False, check_existing=True):
        """Adds a route to the API.

        :param route: A string representation of the route.
        :param endpoint: The endpoint for the route -- can be a callable, or a class.
                         :class:`~apiresponder.Controller` subclasses are
                         constructed with the request and the response.
        :param default: If ``True``, all unknown requests will route to this view.
        """
        self.router.add_route(
            route, endpoint, default=default, check_existing=check_existing
        )

    def route(self, route=None, **options):
        """Decorator for creating new routes around function and class definitions.

        Usage::

            @api.route("/hello")
            class Hello(Controller):
                def on_get(self, req, resp):
                    self.send_data({"hello": "world"})

        """

        def decorator(f):
            self.add_route(route, f, **options)
            return f

        return decorator

    def session(self, base_url="http://testserver"):
        """Testing HTTP client. Returns a session object, able to send HTTP requests to the application.

        :param base_url: The URL to mount the connection adaptor to.
        """

        if self._session is None:
            self._session = TestClient(self, base_url=base_url)
        return self._session

    def url_for(self, endpoint, **params):
        """Given an endpoint, returns a rendered URL for its route.

        :param endpoint: The route endpoint you're searching for.
        :param params: Data to pass into the URL generator (for parameterized URLs).
        """
        return self.router.url_for(endpoint, **params)

    def serve(self, *, address=None, port=None, **options):
        """Runs the application with uvicorn. If the ``PORT`` environment
        variable is set, requests will be served on that port automatically to all
        known hosts.

        :param address: The address to bind to.
        :param port: The port to bind to. Defaults to 5042.
        :param options: Additional keyword arguments to send to ``uvicorn.run()``.
        """

        if "PORT" in os.environ:
            if address is None:
                address = "0.0.0.0"  # noqa: S104
            port = int(os.environ["PORT"])

        if address is None:
            address = "127.0.0.1"
        if port is None:
            port = 5042

        logger.info(f"Serving on http://{address}:{port}")
        uvicorn.run(self, host=address, port=port, **options)

    def run(self, **kwargs):
        self.serve(**kwargs)

    async def __call__(self, scope, receive, send):
        await self.app(scope, receive, send)
