import asyncio
import json

import httpx
import pytest

from studymate.core.errors import ServiceError
from studymate.infra.image_host.http_host import HttpImageHost
from studymate.infra.llm.chat_completion import ChatCompletionLLM
from studymate.infra.ocr.http_ocr import HttpOCR


def _chat_transport(captured: list[httpx.Request], status: int = 200, body: dict | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        payload = body if body is not None else {"choices": [{"message": {"role": "assistant", "content": "4"}}]}
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


def test_chat_completion_sends_single_user_message():
    captured: list[httpx.Request] = []
    llm = ChatCompletionLLM(
        api_base="https://llm.test/v1/",
        model_name="gpt-4o-mini",
        transport=_chat_transport(captured),
    )

    reply = asyncio.run(llm.complete("2+2=?"))

    assert reply == "4"
    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == "https://llm.test/v1/chat/completions"
    assert json.loads(request.content) == {
        "messages": [{"role": "user", "content": "2+2=?"}],
        "model": "gpt-4o-mini",
        "stream": False,
    }


@pytest.mark.parametrize(
    "status,body",
    [
        (500, {"error": "down"}),
        (200, {"choices": []}),
        (200, {"choices": [{"message": {"content": "  "}}]}),
    ],
)
def test_chat_completion_failures_become_service_errors(status, body):
    llm = ChatCompletionLLM(api_base="https://llm.test/v1", model_name="m", transport=_chat_transport([], status, body))

    with pytest.raises(ServiceError):
        asyncio.run(llm.complete("hi"))


def test_chat_completion_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    llm = ChatCompletionLLM(api_base="https://llm.test/v1", model_name="m", transport=httpx.MockTransport(handler))

    with pytest.raises(ServiceError, match="Failed to connect"):
        asyncio.run(llm.complete("hi"))


def test_ocr_posts_image_field_and_returns_text():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"text": "1. 2+2=?"})

    ocr = HttpOCR(api_url="https://ocr.test/api/ocr", transport=httpx.MockTransport(handler))

    text = asyncio.run(ocr.extract_text(b"img", filename="a.png", content_type="image/png"))

    assert text == "1. 2+2=?"
    assert b'name="image"' in captured[0].content
    assert b'filename="a.png"' in captured[0].content


def test_ocr_non_success_status_is_generic_failure():
    ocr = HttpOCR(
        api_url="https://ocr.test/api/ocr",
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
    )

    with pytest.raises(ServiceError, match="Failed to process image"):
        asyncio.run(ocr.extract_text(b"img"))


def test_image_host_sends_file_and_caption():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"link": "https://img.test/x.png"})

    host = HttpImageHost(upload_url="https://img.test/upload-image", transport=httpx.MockTransport(handler))

    result = asyncio.run(host.upload(b"img", filename="x.png", content_type="image/png", caption="me@example.com"))

    assert result == {"link": "https://img.test/x.png"}
    body = captured[0].content
    assert b'name="file"' in body
    assert b'name="caption"' in body
    assert b"me@example.com" in body


@pytest.mark.parametrize("status", [500, 404])
def test_image_host_non_success_status_is_upload_failure(status):
    host = HttpImageHost(
        upload_url="https://img.test/upload-image",
        transport=httpx.MockTransport(lambda request: httpx.Response(status, json={"detail": "boom"})),
    )

    with pytest.raises(ServiceError, match="Upload failed"):
        asyncio.run(host.upload(b"img", filename="x.png", content_type="image/png", caption="me@example.com"))


def test_image_host_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    host = HttpImageHost(upload_url="https://img.test/upload-image", transport=httpx.MockTransport(handler))

    with pytest.raises(ServiceError, match="Upload failed"):
        asyncio.run(host.upload(b"img", filename="x.png", content_type="image/png", caption="me@example.com"))
