from fastapi import Depends, Request

from app.core.context import AppContext, get_context
from app.services.chat_service import ChatService, RequestInfo


def get_chat_service(context: AppContext = Depends(get_context)) -> ChatService:
    return ChatService(context.completions, context.settings)


def get_request_info(request: Request) -> RequestInfo:
    """Client address (first X-Forwarded-For hop when proxied) and user agent for the audit log"""
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return RequestInfo(ip_address=ip_address, user_agent=request.headers.get("user-agent"))
