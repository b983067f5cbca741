# mailrelay/lib/submission.py
from typing import List, Mapping, Optional

from pydantic import BaseModel

from mailrelay.core.mailer import OutboundEmail
from mailrelay.core.settings import Settings

REQUIRED_FIELDS = ("from_name", "from_email", "title", "body")


class MissingFieldError(ValueError):
    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        if len(self.fields) == 1:
            message = f"{self.fields[0]} is required"
        else:
            message = f"{', '.join(self.fields)} are required"
        super().__init__(message)


class FormSubmission(BaseModel):
    from_name: str
    from_email: str
    title: str
    body: str


def _clean(name: str, value: Optional[object]) -> str:
    if not isinstance(value, str):
        return ""
    # body keeps its own whitespace (indented code, quoted replies)
    if name == "body":
        return value
    return value.strip()


def parse_submission(form: Mapping[str, object]) -> FormSubmission:
    values = {name: _clean(name, form.get(name)) for name in REQUIRED_FIELDS}
    missing = [name for name in REQUIRED_FIELDS if not values[name].strip()]
    if missing:
        raise MissingFieldError(missing)
    return FormSubmission(**values)


def compose_email(submission: FormSubmission, settings: Settings) -> OutboundEmail:
    submitter = f"{submission.from_name} <{submission.from_email}>"
    text = f"{submission.body}\n\n--\nSent via contact form by {submitter}"

    if settings.mailgun_from_address:
        # Send from our own domain so SPF/DKIM line up; replies still go to the submitter
        return OutboundEmail(
            sender=f"{submission.from_name} <{settings.mailgun_from_address}>",
            recipient=settings.mailgun_to_address,
            subject=submission.title,
            text=text,
            reply_to=submitter,
        )

    return OutboundEmail(
        sender=submitter,
        recipient=settings.mailgun_to_address,
        subject=submission.title,
        text=text,
    )
