# mailrelay/routers/contact.py
import logging

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from mailrelay.lib.redirect import build_redirect_url
from mailrelay.lib.submission import MissingFieldError, compose_email, parse_submission

router = APIRouter(tags=["contact"])
log = logging.getLogger("uvicorn.error")


@router.post("/")
async def send_form(request: Request):
    settings = request.app.state.settings
    mailer = request.app.state.mailer

    form = await request.form()
    try:
        submission = parse_submission(form)
    except MissingFieldError as exc:
        log.info(f"[contact] Rejected submission: {exc}")
        location = build_redirect_url(settings.redirect_url, ok=False, message=str(exc))
        return RedirectResponse(location, status_code=303)

    outcome = await mailer.send(compose_email(submission, settings))
    if outcome.ok:
        log.info(f"[contact] Relayed message from {submission.from_email}")
    else:
        log.warning(f"[contact] Failed to relay message from {submission.from_email}: {outcome.message}")

    location = build_redirect_url(settings.redirect_url, ok=outcome.ok, message=outcome.message)
    return RedirectResponse(location, status_code=303)
