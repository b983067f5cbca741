# mailrelay/routers/health.py
from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
async def health_root(request: Request):
    settings = request.app.state.settings
    return {"status": "ok", "mail_provider": settings.mail_provider.lower()}
