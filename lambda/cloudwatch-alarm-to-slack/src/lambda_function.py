import json
import logging

import config
from clients import get_http, get_kms_client, get_timeout
from secret_resolver import KmsWebhookResolver, WebhookUrlCache
from slack_client import SlackWebhookClient
from slack_message import AlarmNotification, build_slack_message

# ---- 로깅 설정 ----
logger = logging.getLogger(__name__)
logger.setLevel(config.LOG_LEVEL)

# ---- 필수 환경변수 확인 (없으면 콜드 스타트에서 실패) ----
config.validate()


class MalformedEventError(ValueError):
    pass


def parse_sns_message(event):
    """SNS 이벤트의 첫 번째 레코드에서 CloudWatch 알람 메시지(JSON 문자열)를 파싱"""
    try:
        message = event["Records"][0]["Sns"]["Message"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedEventError(f"SNS message not found in event: {e!r}") from e

    logger.info(f"SNS Message: {message}")
    if not isinstance(message, str):
        raise MalformedEventError("SNS message is not a string")

    try:
        data = json.loads(message)
    except json.JSONDecodeError as e:
        raise MalformedEventError(f"SNS message is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedEventError("SNS message is not a JSON object")
    return data


class AlarmRelay:
    """
    SNS(CloudWatch 알람) -> Slack 전달.
    1. 메시지 파싱
    2. WebHook URL: 캐시에 있으면 그대로, 없으면 KMS 복호화
    3. 메시지 생성 후 전송
    복호화가 성공하기 전에는 절대 전송하지 않는다.
    """

    def __init__(self, cache, resolver, client, formatter=build_slack_message):
        self.cache = cache
        self.resolver = resolver
        self.client = client
        self.formatter = formatter

    def handle(self, event):
        logger.info(f"Event: {json.dumps(event, default=str)}")
        message = parse_sns_message(event)
        alarm = AlarmNotification.from_message(message)
        logger.info("알람 파싱 완료", extra={"alarm_name": alarm.alarm_name, "period": alarm.period})

        webhook_url = self.cache.get()
        if webhook_url is None:
            webhook_url = self.resolver.resolve()

        payload = self.formatter(alarm)
        return self.client.deliver(webhook_url, payload)


_relay = None


def get_relay():
    """컨테이너당 1회 생성. 같은 컨테이너의 이후 호출은 캐시된 URL을 재사용한다."""
    global _relay
    if _relay is None:
        cache = WebhookUrlCache()
        _relay = AlarmRelay(
            cache=cache,
            resolver=KmsWebhookResolver(get_kms_client(), config.WEBHOOK, cache),
            client=SlackWebhookClient(get_http(), timeout=get_timeout()),
        )
    return _relay


def lambda_handler(event, context):
    request_id = getattr(context, "aws_request_id", "unknown")
    try:
        result = get_relay().handle(event)
    except Exception:
        logger.error("알람 전달 실패", extra={"request_id": request_id}, exc_info=True)
        raise
    logger.info(result, extra={"request_id": request_id})
    return result
