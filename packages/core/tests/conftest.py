import httpx
import pytest

from fake_bitbucket import API, CALLBACK_URL, FakeBitbucket
from prgate_core.bitbucket.client import BitbucketClient


@pytest.fixture
def bitbucket():
    return FakeBitbucket()


@pytest.fixture
def http_client(bitbucket):
    with httpx.Client(transport=httpx.MockTransport(bitbucket.handle)) as client:
        yield client


@pytest.fixture
def client(http_client):
    return BitbucketClient(http_client, "bot", "app-password", CALLBACK_URL, base_url=API)
