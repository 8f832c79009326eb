"""登录链接投递：配置了 ``SMTP_HOST`` 时通过 SMTP 发送，否则写入日志。"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.logger import logger

SUBJECT = "한영 기술용어집 로그인 링크"


def _compose(recipient: str, link: str, expires_minutes: int) -> EmailMessage:
    settings = get_settings()
    message = EmailMessage()
    message["Subject"] = SUBJECT
    message["From"] = settings.smtp_sender
    message["To"] = recipient
    message.set_content(
        "아래 링크를 눌러 로그인하세요.\n\n"
        f"{link}\n\n"
        f"이 링크는 {expires_minutes}분 동안 유효합니다."
    )
    return message


def send_magic_link(recipient: str, link: str) -> None:
    """发送登录链接；SMTP 异常向上抛出，由调用方转换为业务错误。"""
    settings = get_settings()
    if not settings.smtp_host:
        logger.info("SMTP is not configured; login link for %s: %s", recipient, link)
        return

    message = _compose(recipient, link, settings.magic_link_expire_minutes)
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as client:
        if settings.smtp_use_tls:
            client.starttls()
        if settings.smtp_user:
            client.login(settings.smtp_user, settings.smtp_password or "")
        client.send_message(message)
    logger.info("Login link sent to %s", recipient)
