import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from urllib.parse import quote

import config

DEFAULT_HEADER = "Internal Server Errors"

QUERY_FIELDS = "fields @timestamp, @message, request_uri, status\n| sort @timestamp desc\n"
FILTER_500 = "status = 500\n"
FILTER_ERROR_MESSAGES = "@message like /\\[error\\]/\n"


@dataclass(frozen=True)
class AlarmNotification:
    alarm_name: Optional[str] = None
    description: Optional[str] = None
    period: Optional[int] = None

    @classmethod
    def from_message(cls, message: Dict) -> "AlarmNotification":
        """SNS 메시지(CloudWatch 알람 JSON)에서 필요한 필드만 추출. 없는 필드는 None."""
        description = message.get("AlarmDescription") or message.get("Description")
        trigger = message.get("Trigger")
        period = trigger.get("Period") if isinstance(trigger, dict) else None
        return cls(
            alarm_name=_text_or_none(message.get("AlarmName")),
            description=_text_or_none(description),
            period=_period_or_none(period),
        )


def _text_or_none(value):
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _period_or_none(value):
    # NaN / Infinity / 0 이하는 없는 값으로 취급
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        period = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        period = int(value.strip())
    else:
        return None
    return period if period > 0 else None


def _mrkdwn_escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape(value: str) -> str:
    """
    Logs Insights 콘솔 URL fragment 인코딩.
    퍼센트 인코딩 후 '%' 대신 '*' 사용 (예: ':' -> '*3a', ' ' -> '*20').
    """
    quoted = quote(value, safe="").replace("~", "%7E")
    return re.sub(r"%([0-9A-Fa-f]{2})", lambda m: "*" + m.group(1).lower(), quoted)


def _iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def insights_link(description: str, query_filter: str, now: Optional[datetime] = None) -> str:
    """description 기반 로그 그룹을 최근 QUERY_WINDOW_SECONDS 동안 조회하는 Logs Insights 링크"""
    end = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    start = end - timedelta(seconds=config.QUERY_WINDOW_SECONDS)
    log_group = config.LOG_GROUP_TEMPLATE.format(description=description)
    region = config.AWS_REGION

    query_detail = (
        f"~(end~'{_escape(_iso(end))}"
        f"~start~'{_escape(_iso(start))}"
        "~timeType~'ABSOLUTE"
        "~tz~'Local"
        f"~editorString~'{_escape(QUERY_FIELDS + '| filter ' + query_filter)}"
        "~isLiveTail~false"
        f"~source~(~'{_escape(log_group)}))"
    )
    return (
        f"https://{region}.console.aws.amazon.com/cloudwatch/home?region={region}"
        f"#logs-insights:queryDetail={query_detail};tab=logs"
    )


def build_slack_message(alarm: AlarmNotification, now: Optional[datetime] = None,
                        channel: Optional[str] = None, username: Optional[str] = None,
                        icon_emoji: Optional[str] = None, icon_url: Optional[str] = None) -> Dict:
    """
    알람 정보를 Slack Block Kit 메시지로 변환.
    - period 없음: "in the last N seconds" 문구 생략
    - description 없음: 로그 링크(divider + context) 생략
    - alarm_name 없음: 기본 헤더 사용
    """
    header = _mrkdwn_escape(alarm.alarm_name or DEFAULT_HEADER)
    sentence = "Encountered request(s) with status code 500"
    if alarm.period is not None and alarm.period > 0:
        sentence += f" in the last {alarm.period} seconds"

    blocks: List[Dict] = [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*{header}*\n{sentence}."},
        }
    ]

    if alarm.description:
        blocks.append({"type": "divider"})
        blocks.append({
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"<{insights_link(alarm.description, FILTER_500, now)}|View 500 errors>",
                },
                {
                    "type": "mrkdwn",
                    "text": f"<{insights_link(alarm.description, FILTER_ERROR_MESSAGES, now)}|View error messages>",
                },
            ],
        })

    message: Dict = {"blocks": blocks}

    # 표시 옵션은 값이 있을 때만 그대로 전달
    display = {
        "channel": config.CHANNEL if channel is None else channel,
        "username": config.USERNAME if username is None else username,
        "icon_emoji": config.ICON_EMOJI if icon_emoji is None else icon_emoji,
        "icon_url": config.ICON_URL if icon_url is None else icon_url,
    }
    for key, value in display.items():
        if value:
            message[key] = value

    return message
