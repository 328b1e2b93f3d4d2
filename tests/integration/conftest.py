from __future__ import annotations

import os

import httpx
import pytest

from src.adapters.aws import LOCALSTACK_DEFAULT_URL, env_bool


@pytest.fixture(scope="session", autouse=True)
def localstack_env() -> None:
    """Point boto3 at LocalStack unless the environment already says otherwise."""

    defaults = {
        "USE_LOCALSTACK": "true",
        "ENDPOINT_URL": LOCALSTACK_DEFAULT_URL,
        "AWS_REGION": "eu-west-1",
        # LocalStack accepts any credentials, but boto3 insists on some.
        "AWS_ACCESS_KEY_ID": "test",
        "AWS_SECRET_ACCESS_KEY": "test",
    }
    for name, value in defaults.items():
        os.environ.setdefault(name, value)


@pytest.fixture(scope="session")
def require_localstack(localstack_env: None) -> str:
    endpoint_url = os.environ["ENDPOINT_URL"]
    try:
        healthy = httpx.get(
            endpoint_url.rstrip("/") + "/_localstack/health", timeout=1.5
        ).is_success
    except httpx.HTTPError:
        healthy = False

    if not healthy:
        msg = f"LocalStack not reachable at {endpoint_url}"
        # CI starts LocalStack, so an unreachable endpoint there is a failure.
        if env_bool("CI") or env_bool("GITHUB_ACTIONS") or env_bool("REQUIRE_LOCALSTACK"):
            pytest.fail(msg, pytrace=False)
        pytest.skip(msg)
    return endpoint_url
