import base64
import logging
from typing import Optional

import config

logger = logging.getLogger(__name__)
logger.setLevel(config.LOG_LEVEL)


class WebhookUrlCache:
    """
    복호화된 WebHook URL을 담는 단일 슬롯.
    컨테이너(프로세스)당 한 번 생성되어 AlarmRelay가 소유한다.
    한 번 채워지면 다시 바뀌지 않는다 (TTL / 무효화 없음).
    """

    def __init__(self):
        self._url = None

    def get(self) -> Optional[str]:
        return self._url

    def set(self, url: str):
        if self._url is None:
            self._url = url

    @property
    def is_populated(self) -> bool:
        return self._url is not None


class KmsWebhookResolver:

    def __init__(self, kms_client, ciphertext_b64: str, cache: WebhookUrlCache):
        self._kms = kms_client
        self._ciphertext_b64 = ciphertext_b64
        self._cache = cache

    def resolve(self) -> str:
        """
        KMS로 WebHook URL 복호화 후 캐시에 저장.
        실패 시 예외를 그대로 올리고 캐시는 비워둔다 (다음 호출에서 재시도).
        """
        logger.info("KMS 복호화 요청 중...")
        try:
            # 줄바꿈/공백이 섞인 값도 허용
            blob = base64.b64decode("".join(self._ciphertext_b64.split()), validate=True)
            resp = self._kms.decrypt(CiphertextBlob=blob)
        except Exception:
            logger.error("KMS 복호화 실패", exc_info=True)
            raise

        url = resp["Plaintext"].decode("utf-8")
        self._cache.set(url)
        logger.info("WebHook URL 복호화 완료.")
        return url
