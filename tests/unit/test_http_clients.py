"""Unit-тесты клиентов внешних сервисов: рендеринг, почта, хранилище."""

import json
import pytest
import httpx
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from shared.services.contract_errors import UpstreamFailure
from shared.services.media_storage import S3ArtifactStorageClient
from shared.services.rendering_client import RenderingServiceClient
from shared.services.senders.email_sender import EmailDeliveryClient

RENDER_URL = "http://renderer.test/render/contract"
EMAIL_URL = "http://mailer.test/send-email"


def _transport(status_code=200, body=None, captured=None, error=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if error is not None:
            raise error
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


class TestRenderingServiceClient:
    """Клиент сервиса рендеринга PDF."""

    @pytest.mark.asyncio
    async def test_returns_artifact_path(self):
        captured = []
        client = RenderingServiceClient(
            RENDER_URL, transport=_transport(body={"artifactPath": "e/umowa.pdf"}, captured=captured)
        )

        path = await client.render_pdf({"eventId": "e", "contractId": "c", "html": "<p/>"})

        assert path == "e/umowa.pdf"
        assert str(captured[0].url) == RENDER_URL
        assert json.loads(captured[0].content)["contractId"] == "c"

    @pytest.mark.asyncio
    async def test_http_error_is_upstream_failure(self):
        client = RenderingServiceClient(RENDER_URL, transport=_transport(500, {"error": "boom"}))

        with pytest.raises(UpstreamFailure) as exc_info:
            await client.render_pdf({"contractId": "c"})
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_connection_error_is_upstream_failure(self):
        client = RenderingServiceClient(
            RENDER_URL, transport=_transport(error=httpx.ConnectError("refused"))
        )
        with pytest.raises(UpstreamFailure):
            await client.render_pdf({"contractId": "c"})

    @pytest.mark.asyncio
    async def test_missing_artifact_path(self):
        client = RenderingServiceClient(RENDER_URL, transport=_transport(body={"status": "ok"}))
        with pytest.raises(UpstreamFailure):
            await client.render_pdf({"contractId": "c"})


class TestEmailDeliveryClient:
    """Клиент сервиса доставки почты."""

    @pytest.mark.asyncio
    async def test_send_returns_confirmation(self):
        captured = []
        client = EmailDeliveryClient(
            EMAIL_URL, transport=_transport(body={"success": True, "messageId": "m-1"}, captured=captured)
        )

        result = await client.send({"to": "a@b.pl", "subject": "Umowa", "htmlBody": "<p/>"})

        assert result == {"success": True, "messageId": "m-1"}
        assert captured[0].method == "POST"

    @pytest.mark.asyncio
    async def test_rejected_message(self):
        client = EmailDeliveryClient(
            EMAIL_URL, transport=_transport(body={"success": False, "error": "SMTP auth failed"})
        )
        with pytest.raises(UpstreamFailure) as exc_info:
            await client.send({"to": "a@b.pl"})
        assert exc_info.value.message == "SMTP auth failed"

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = EmailDeliveryClient(EMAIL_URL, transport=_transport(502, {"error": "bad gateway"}))
        with pytest.raises(UpstreamFailure):
            await client.send({"to": "a@b.pl"})


class TestS3ArtifactStorageClient:
    """Presigned-ссылки через boto3."""

    @pytest.mark.asyncio
    async def test_signed_url(self):
        s3 = MagicMock()
        s3.generate_presigned_url.return_value = "https://s3.test/bucket/e/umowa.pdf?X-Amz-Signature=1"
        storage = S3ArtifactStorageClient(client=s3, bucket="contracts")

        url = await storage.get_signed_url("e/umowa.pdf", 900)

        assert url.startswith("https://s3.test/")
        s3.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "contracts", "Key": "e/umowa.pdf"},
            ExpiresIn=900,
        )

    @pytest.mark.asyncio
    async def test_signed_url_failure(self):
        s3 = MagicMock()
        s3.generate_presigned_url.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GeneratePresignedUrl"
        )
        storage = S3ArtifactStorageClient(client=s3, bucket="contracts")

        with pytest.raises(UpstreamFailure):
            await storage.get_signed_url("e/umowa.pdf")

    @pytest.mark.asyncio
    async def test_exists(self):
        s3 = MagicMock()
        storage = S3ArtifactStorageClient(client=s3, bucket="contracts")
        assert await storage.exists("e/umowa.pdf") is True

        s3.head_object.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadObject")
        assert await storage.exists("e/missing.pdf") is False
