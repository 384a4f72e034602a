import json
import logging
from typing import Dict, Optional
from urllib.parse import urlsplit

import urllib3

import config

logger = logging.getLogger(__name__)
logger.setLevel(config.LOG_LEVEL)

SUCCESS_MESSAGE = "Request completed successfully."
CHUNK_SIZE = 1024


class DeliveryError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SlackWebhookClient:
    """Slack Incoming WebHook 전송. 호출당 1회만 시도한다 (재시도 없음)."""

    def __init__(self, http, timeout=None):
        self._http = http
        self._timeout = timeout

    def deliver(self, url: str, payload: Dict) -> str:
        body = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }
        target = urlsplit(url)
        # WebHook 경로 자체가 비밀값이므로 host만 남긴다
        logger.info(f"Request options: POST {target.scheme}://{target.netloc}", extra={"headers": headers})
        logger.info(f"Request body: {body.decode('utf-8')}")

        options = {"retries": False, "preload_content": False}
        if self._timeout is not None:
            options["timeout"] = self._timeout

        try:
            response = self._http.request("POST", url, body=body, headers=headers, **options)
            status_code = response.status
            logger.info(f"Status code: {status_code}")

            # 응답 본문은 chunk 단위로 끝까지 누적
            chunks = []
            try:
                for chunk in response.stream(CHUNK_SIZE):
                    chunks.append(chunk)
            finally:
                response.release_conn()
        except urllib3.exceptions.HTTPError as e:
            logger.error(f"Slack 요청 실패: {e}", exc_info=True)
            raise DeliveryError(f"Request failed: {e}") from e

        response_body = b"".join(chunks).decode("utf-8", errors="replace")
        logger.info(f"Response: {response_body}")

        if 200 <= status_code < 300:
            return SUCCESS_MESSAGE
        raise DeliveryError(
            f"Request failed with status code {status_code}.",
            status_code=status_code,
            body=response_body,
        )
