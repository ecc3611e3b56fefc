import inspect
import logging
import re

from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException

from . import status_codes
from .controller import Controller
from .exceptions import ResponseSent
from .models import Request, Response

logger = logging.getLogger(__name__)

_CONVERTORS = {
    "int": (int, r"\d+"),
    "str": (str, r"[^/]+"),
    "float": (float, r"\d+(.\d+)?"),
}

PARAM_RE = re.compile("{([a-zA-Z_][a-zA-Z0-9_]*)(:[a-zA-Z_][a-zA-Z0-9_]*)?}")


def compile_path(path):
    path_re = "^"
    param_convertors = {}
    idx = 0

    for match in PARAM_RE.finditer(path):
        param_name, convertor_type = match.groups(default="str")
        convertor_type = convertor_type.lstrip(":")
        assert (
            convertor_type in _CONVERTORS.keys()
        ), f"Unknown path convertor '{convertor_type}'"
        convertor, convertor_re = _CONVERTORS[convertor_type]

        path_re += path[idx : match.start()]
        path_re += rf"(?P<{param_name}>{convertor_re})"

        param_convertors[param_name] = convertor

        idx = match.end()

    path_re += path[idx:] + "$"

    return re.compile(path_re), param_convertors


class Route:
    def __init__(self, route, endpoint):
        assert route.startswith("/"), "Route path must start with '/'"
        self.route = route
        self.endpoint = endpoint

        self.path_re, self.param_convertors = compile_path(route)

    def __repr__(self):
        return f"<Route {self.route!r}={self.endpoint!r}>"

    def url(self, **params):
        return PARAM_RE.sub(r"{\1}", self.route).format(**params)

    @property
    def endpoint_name(self):
        return self.endpoint.__name__

    @property
    def description(self):
        return self.endpoint.__doc__

    def matches(self, scope):
        if scope["type"] != "http":
            return False, {}

        path = scope["path"]
        match = self.path_re.match(path)

        if match is None:
            return False, {}

        matched_params = match.groupdict()
        for key, value in matched_params.items():
            matched_params[key] = self.param_convertors[key](value)

        return True, {"path_params": {**matched_params}}

    def _views(self, request, response):
        if not inspect.isclass(self.endpoint):
            return [self.endpoint]

        if issubclass(self.endpoint, Controller):
            endpoint = self.endpoint(request, response)
        else:
            endpoint = self.endpoint()

        views = []
        on_request = getattr(endpoint, "on_request", None)
        if on_request:
            views.append(on_request)

        method_name = f"on_{request.method}"
        try:
            views.append(getattr(endpoint, method_name))
        except AttributeError:
            if on_request is None:
                raise HTTPException(status_code=status_codes.HTTP_405)
        return views

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)
        response = Response()

        path_params = scope.get("path_params", {})

        try:
            for view in self._views(request, response):
                if inspect.iscoroutinefunction(view):
                    await view(request, response, **path_params)
                else:
                    await run_in_threadpool(view, request, response, **path_params)
        except ResponseSent:
            logger.debug(f"Response sent early by {self.endpoint_name}")

        if response.status_code is None:
            response.status_code = status_codes.HTTP_200

        await response(scope, receive, send)

    def __eq__(self, other):
        return self.route == other.route and self.endpoint == other.endpoint

    def __hash__(self):
        return hash(self.route) ^ hash(self.endpoint)


class Router:
    def __init__(self, routes=None, default_response=None):
        self.routes = [] if routes is None else list(routes)
        self.default_endpoint = (
            self.default_response if default_response is None else default_response
        )

    def add_route(self, route=None, endpoint=None, *, default=False, check_existing=False):
        """Adds a route to the router.
        :param route: A string representation of the route
        :param endpoint: The endpoint for the route -- can be callable, or class.
        :param default: If ``True``, all unknown requests will route to this view.
        """
        if check_existing:
            assert not self.routes or route not in (
                item.route for item in self.routes
            ), f"Route '{route}' already exists"

        route = Route(route, endpoint)
        if default:
            self.default_endpoint = route

        self.routes.append(route)

    def url_for(self, endpoint, **params):
        for route in self.routes:
            if endpoint in (route.endpoint, route.endpoint.__name__):
                return route.url(**params)
        return None

    async def default_response(self, scope, receive, send):
        raise HTTPException(status_code=status_codes.HTTP_404)

    def _resolve_route(self, scope):
        for route in self.routes:
            matches, child_scope = route.matches(scope)
            if matches:
                scope.update(child_scope)
                return route
        return None

    async def lifespan(self, scope, receive, send):
        message = await receive()
        assert message["type"] == "lifespan.startup"
        await send({"type": "lifespan.startup.complete"})

        message = await receive()
        assert message["type"] == "lifespan.shutdown"
        await send({"type": "lifespan.shutdown.complete"})

    async def __call__(self, scope, receive, send):
        assert scope["type"] in ("http", "lifespan")

        if scope["type"] == "lifespan":
            await self.lifespan(scope, receive, send)
            return

        route = self._resolve_route(scope)
        if route is not None:
            await route(scope, receive, send)
            return

        await self.default_endpoint(scope, receive, send)
