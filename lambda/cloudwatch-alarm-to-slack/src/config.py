import os

# --- 공통 ---
AWS_REGION = os.environ.get("AWS_REGION", "eu-west-1")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# --- Slack (필수) ---
# KMS로 암호화된 Slack WebHook URL (base64)
WEBHOOK = os.environ.get("webhook", "")

# --- Slack 메시지 표시 옵션 (선택) ---
CHANNEL = os.environ.get("channel", "")
USERNAME = os.environ.get("username", "")
ICON_EMOJI = os.environ.get("icon_emoji", "")
ICON_URL = os.environ.get("icon_url", "")

# --- CloudWatch Logs Insights 링크 ---
LOG_GROUP_TEMPLATE = os.environ.get(
    "LOG_GROUP_TEMPLATE",
    "/aws/elasticbeanstalk/{description}/docker/nginx"
)
QUERY_WINDOW_SECONDS = int(os.environ.get("QUERY_WINDOW_SECONDS", "3600"))

# --- HTTP 타임아웃 (초) ---
HTTP_CONNECT_TIMEOUT = float(os.environ.get("HTTP_CONNECT_TIMEOUT", "3"))
HTTP_READ_TIMEOUT = float(os.environ.get("HTTP_READ_TIMEOUT", "10"))


class ConfigurationError(Exception):
    pass


def validate():
    """필수 환경변수 확인. 없으면 Lambda 초기화 단계에서 실패시킨다."""
    if not WEBHOOK:
        raise ConfigurationError("Missing environment variable: webhook")
