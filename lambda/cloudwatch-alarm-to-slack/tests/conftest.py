import base64
import json
import os

# config는 import 시점에 환경변수를 읽으므로 테스트 모듈보다 먼저 설정
os.environ.setdefault("webhook", base64.b64encode(b"placeholder-ciphertext").decode("ascii"))
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

REGION = "eu-west-1"
WEBHOOK_URL = "https://hooks.example.com/services/T000/B000/XXXX"


class FakeResponse:
    def __init__(self, status, chunks):
        self.status = status
        self._chunks = list(chunks)
        self.released = False

    def stream(self, amt=None):
        for chunk in self._chunks:
            yield chunk

    def release_conn(self):
        self.released = True


class FakeHttp:
    """urllib3.PoolManager 대역. 요청을 기록하고 미리 정한 응답을 chunk 단위로 돌려준다."""

    def __init__(self, status=200, chunks=(b"ok",), error=None):
        self.status = status
        self.chunks = chunks
        self.error = error
        self.requests = []
        self.responses = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        response = FakeResponse(self.status, self.chunks)
        self.responses.append(response)
        return response


class CountingKms:
    def __init__(self, client):
        self.client = client
        self.decrypt_calls = 0

    def decrypt(self, **kwargs):
        self.decrypt_calls += 1
        return self.client.decrypt(**kwargs)


class FailingKms:
    """decrypt 호출 횟수만 세고 항상 ClientError를 던지는 KMS 대역"""

    def __init__(self, code="InvalidCiphertextException"):
        self.code = code
        self.decrypt_calls = 0

    def decrypt(self, **kwargs):
        self.decrypt_calls += 1
        raise ClientError({"Error": {"Code": self.code, "Message": "decrypt failed"}}, "Decrypt")


def sns_event(message):
    if not isinstance(message, str):
        message = json.dumps(message)
    return {"Records": [{"EventSource": "aws:sns", "Sns": {"Message": message}}]}


@pytest.fixture
def kms():
    with mock_aws():
        yield CountingKms(boto3.client("kms", region_name=REGION))


@pytest.fixture
def encrypted_webhook(kms):
    key_id = kms.client.create_key(Description="slack-webhook")["KeyMetadata"]["KeyId"]
    blob = kms.client.encrypt(KeyId=key_id, Plaintext=WEBHOOK_URL.encode("utf-8"))["CiphertextBlob"]
    return base64.b64encode(blob).decode("ascii")


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def failing_kms():
    return FailingKms()
