# mailrelay/core/mailer.py
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from mailrelay.core.settings import ConfigError, Settings

log = logging.getLogger("uvicorn.error")

TIMEOUT_MESSAGE = "Timed out waiting for the mail provider"
TRANSPORT_MESSAGE = "Could not reach the mail provider"
# Keeps the redirect Location header a sane size
MAX_MESSAGE_LENGTH = 300


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    recipient: str
    subject: str
    text: str
    reply_to: Optional[str] = None


@dataclass(frozen=True)
class SendOutcome:
    ok: bool
    message: Optional[str] = None

    @classmethod
    def success(cls) -> "SendOutcome":
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> "SendOutcome":
        return cls(ok=False, message=message)


class Mailer(Protocol):
    async def send(self, email: OutboundEmail) -> SendOutcome: ...


def _truncate(message: str) -> str:
    if len(message) <= MAX_MESSAGE_LENGTH:
        return message
    return message[: MAX_MESSAGE_LENGTH - 3].rstrip() + "..."


def _error_message(resp: httpx.Response) -> str:
    # Mailgun doesn't return JSON on a 401, just a text body
    if resp.status_code != 401:
        try:
            data = resp.json()
            if isinstance(data, dict) and data.get("message"):
                return _truncate(str(data["message"]))
        except ValueError:
            pass
    text = resp.text.strip()
    if text:
        return _truncate(text)
    return f"Mail provider returned HTTP {resp.status_code}"


class MailgunMailer:
    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self._client = client
        self._url = settings.messages_url
        self._auth = ("api", settings.mailgun_api_key)
        self._timeout = settings.mailgun_timeout

    async def send(self, email: OutboundEmail) -> SendOutcome:
        data = {
            "from": email.sender,
            "to": email.recipient,
            "subject": email.subject,
            "text": email.text,
        }
        if email.reply_to:
            data["h:Reply-To"] = email.reply_to

        log.info(f"[mailer] Sending mail from [{email.sender}]")
        try:
            resp = await self._client.post(
                self._url, data=data, auth=self._auth, timeout=self._timeout
            )
        except httpx.TimeoutException as exc:
            log.error(f"[mailer] Mailgun request timed out: {exc!r}")
            return SendOutcome.failure(TIMEOUT_MESSAGE)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.error(f"[mailer] Mailgun request failed: {exc!r}")
            return SendOutcome.failure(TRANSPORT_MESSAGE)

        log.info(f"[mailer] Received response with status {resp.status_code}")
        if resp.is_success:
            return SendOutcome.success()

        message = _error_message(resp)
        if resp.status_code == 401:
            log.error("[mailer] Received a 401 trying to call Mailgun, check MAILGUN_API_KEY")
        else:
            log.error(f"[mailer] Received an error from Mailgun: {message}")
        return SendOutcome.failure(message)


class LogMailer:
    """Dev stand-in: writes the message to the log and reports success."""

    async def send(self, email: OutboundEmail) -> SendOutcome:
        log.info(
            f"[mailer] (log provider) from={email.sender!r} to={email.recipient!r} "
            f"subject={email.subject!r} reply_to={email.reply_to!r}\n{email.text}"
        )
        return SendOutcome.success()


def get_mailer(settings: Settings, client: httpx.AsyncClient) -> Mailer:
    provider = settings.mail_provider.lower()
    if provider == "mailgun":
        return MailgunMailer(settings, client)
    if provider == "log":
        return LogMailer()
    raise ConfigError(f'Unknown MAIL_PROVIDER "{settings.mail_provider}" (expected "mailgun" or "log")')
