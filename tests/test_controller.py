from xml.etree import ElementTree

import pytest

from apiresponder import (
    Controller,
    FormatMode,
    JSONResponseProvider,
    XMLResponseProvider,
)


@pytest.fixture
def echo(api):
    @api.route("/echo")
    class Echo(Controller):
        async def on_post(self, req, resp):
            self.send_data(await self.input_params())

    return Echo


@pytest.mark.parametrize(
    "params, provider_cls",
    [
        pytest.param({"format": "JSON"}, JSONResponseProvider, id="JSON"),
        pytest.param({"format": "json"}, JSONResponseProvider, id="json"),
        pytest.param({"format": "Json"}, JSONResponseProvider, id="Json"),
        pytest.param({"format": "xml"}, XMLResponseProvider, id="xml"),
        pytest.param({"format": "XML"}, XMLResponseProvider, id="XML"),
        pytest.param({"format": ""}, JSONResponseProvider, id="empty"),
        pytest.param({"format": "garbage"}, JSONResponseProvider, id="garbage"),
        pytest.param({}, JSONResponseProvider, id="absent"),
    ],
)
def test_format_resolution(api, params, provider_cls):
    resolved = []

    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            resolved.append(type(self.response_provider))
            resp.text = "ok"

    r = api.requests.get(api.url_for(Resource), params=params)
    assert r.status_code == 200
    assert resolved == [provider_cls]


def test_send_data_json(api):
    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            self.send_data({"result": "ok"}, 200, ["X-Total: 5"])

    r = api.requests.get(api.url_for(Resource))
    assert r.status_code == 200
    assert r.headers["X-Total"] == "5"
    assert "application/json" in r.headers["Content-Type"]
    assert r.text == '{"result":"ok"}'


def test_send_data_xml(api):
    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            self.send_data({"result": "ok"}, 200, ["X-Total: 5"])

    r = api.requests.get(api.url_for(Resource), params={"format": "xml"})
    assert r.status_code == 200
    assert r.headers["X-Total"] == "5"
    assert "application/xml" in r.headers["Content-Type"]
    assert ElementTree.fromstring(r.content).find("result").text == "ok"


def test_send_data_ends_request(api):
    reached = []

    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            self.send_data({"result": "ok"})
            reached.append(True)
            resp.status_code = 500

    r = api.requests.get(api.url_for(Resource))
    assert r.status_code == 200
    assert r.json() == {"result": "ok"}
    assert reached == []


def test_send_data_default_status_code(api):
    @api.route("/")
    class Resource(Controller):
        status_code = 402

        async def on_get(self, req, resp):
            self.send_data({"pay": "up"})

    r = api.requests.get(api.url_for(Resource))
    assert r.status_code == 402
    assert r.json() == {"pay": "up"}


def test_send_data_unknown_status_code(api):
    captured = []

    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            captured.append(resp)
            self.send_data({}, 418)

    r = api.requests.get(api.url_for(Resource))
    assert r.status_code == 418
    assert captured[0].reason_phrase == ""


@pytest.mark.parametrize("fmt", ["json", "xml"])
def test_access_denied(api, fmt):
    reached = []

    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            self.access_denied()
            reached.append(True)

    r = api.requests.get(api.url_for(Resource), params={"format": fmt})
    assert r.status_code == 403
    assert r.reason_phrase == "Forbidden"
    assert reached == []

    message = "You do not have sufficient permissions to access."
    if fmt == "xml":
        assert "application/xml" in r.headers["Content-Type"]
        root = ElementTree.fromstring(r.content)
        assert root.find("error/code").text == "403"
        assert root.find("error/message").text == message
    else:
        assert "application/json" in r.headers["Content-Type"]
        assert r.json() == {"error": {"code": 403, "message": message}}


def test_input_params_json(api, echo):
    r = api.requests.post(api.url_for(echo), content='{"a":1,"b":"x"}')
    assert r.json() == {"a": 1, "b": "x"}


def test_input_params_form_body(api, echo):
    r = api.requests.post(api.url_for(echo), content="a=1&b=x")
    assert r.json() == {"a": "1", "b": "x"}


def test_input_params_form_blank_values(api, echo):
    r = api.requests.post(api.url_for(echo), content="a=&b=x")
    assert r.json() == {"a": "", "b": "x"}


def test_input_params_form_list_fields(api, echo):
    r = api.requests.post(api.url_for(echo), content="ids[]=1&ids[]=2")
    assert r.json() == {"ids": ["1", "2"]}


def test_input_params_urlencoded_post(api, echo):
    r = api.requests.post(api.url_for(echo), data={"a": "1", "b": "x"})
    assert r.json() == {"a": "1", "b": "x"}


def test_input_params_multipart_post(api, echo):
    r = api.requests.post(api.url_for(echo), files={"a": (None, "1"), "b": (None, "x")})
    assert r.json() == {"a": "1", "b": "x"}


@pytest.mark.parametrize(
    "body",
    [
        pytest.param("", id="empty"),
        pytest.param("garbage", id="garbage"),
        pytest.param("{not json", id="broken json"),
        pytest.param("[1, 2]", id="json list"),
        pytest.param("42", id="json scalar"),
        pytest.param("null", id="json null"),
        pytest.param(b"\xff\xfe\xfa", id="undecodable"),
        pytest.param("[" * 100000 + "]" * 100000, id="deeply nested json"),
    ],
)
def test_input_params_unparseable(api, echo, body):
    r = api.requests.post(api.url_for(echo), content=body)
    assert r.status_code == 200
    assert r.json() == {}


def test_input_params_xml_output(api, echo):
    r = api.requests.post(
        api.url_for(echo), params={"format": "xml"}, content='{"a":1,"b":"x"}'
    )
    root = ElementTree.fromstring(r.content)
    assert root.find("a").text == "1"
    assert root.find("b").text == "x"


def test_response_provider_setter(api):
    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            self.response_provider = XMLResponseProvider(resp)
            self.access_denied()

    r = api.requests.get(api.url_for(Resource))
    assert r.status_code == 403
    assert "application/xml" in r.headers["Content-Type"]


def test_response_provider_setter_rejects_other_types(api):
    errors = []

    @api.route("/")
    class Resource(Controller):
        def on_get(self, req, resp):
            with pytest.raises(TypeError) as info:
                self.response_provider = "xml"
            errors.append(info.value)
            self.send_data({"mode": self.response_provider.mode.value})

    r = api.requests.get(api.url_for(Resource))
    assert r.json() == {"mode": FormatMode.JSON.value}
    assert len(errors) == 1


def test_controller_format_param(api):
    @api.route("/")
    class Resource(Controller):
        format_param = "output"

        def on_get(self, req, resp):
            self.send_data({"result": "ok"})

    r = api.requests.get(api.url_for(Resource), params={"output": "XML"})
    assert ElementTree.fromstring(r.content).find("result").text == "ok"

    r = api.requests.get(api.url_for(Resource), params={"format": "xml"})
    assert r.json() == {"result": "ok"}
