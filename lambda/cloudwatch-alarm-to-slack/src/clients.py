import boto3
import urllib3
import config

_kms_client = None
_http = None


def get_kms_client():
    global _kms_client
    if _kms_client is None:
        _kms_client = boto3.client("kms", region_name=config.AWS_REGION)
    return _kms_client


def get_http():
    global _http
    if _http is None:
        # 재시도는 SNS 재전송에 맡긴다
        _http = urllib3.PoolManager(retries=False)
    return _http


def get_timeout():
    return urllib3.Timeout(connect=config.HTTP_CONNECT_TIMEOUT, read=config.HTTP_READ_TIMEOUT)
