import httpx
import pytest

from captcha_verify.services.captcha_service import CaptchaVerifier

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class FakeSiteVerify:
    """Stand-in for the siteverify endpoint; records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.content_type = JSON_CONTENT_TYPE
        self.body = '{"success": true}'

    def reply(
        self,
        body: str,
        *,
        status_code: int = 200,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.content_type = content_type

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            headers={"Content-Type": self.content_type},
            content=self.body.encode("utf-8"),
        )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def siteverify() -> FakeSiteVerify:
    return FakeSiteVerify()


@pytest.fixture
def verifier(siteverify: FakeSiteVerify) -> CaptchaVerifier:
    transport = httpx.MockTransport(siteverify)
    client = httpx.Client(transport=transport)
    service = CaptchaVerifier(
        client=client,
        async_client=httpx.AsyncClient(transport=transport),
    )
    yield service
    client.close()
