import pytest

import apiresponder


@pytest.fixture
def api():
    return apiresponder.API(debug=False)


@pytest.fixture
def session(api):
    return api.requests


@pytest.fixture
def url():
    def url_for(s):
        return f"http://testserver{s}"

    return url_for
