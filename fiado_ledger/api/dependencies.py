"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from fiado_ledger.config import Settings
from fiado_ledger.infrastructure.clients.reminder import ReminderClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    """Settings the application was created with"""
    return request.app.state.settings


def get_reminder_client(request: Request) -> ReminderClient:
    """Provide text-generation client instance"""
    app_settings: Settings = request.app.state.settings
    return ReminderClient(
        api_key=app_settings.gemini_api_key,
        base_url=app_settings.gemini_api_base,
        model=app_settings.gemini_model,
        timeout=app_settings.reminder_timeout_seconds,
        fallback_message=app_settings.reminder_fallback_message,
    )
