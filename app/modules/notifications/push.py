"""Best-effort delivery to the Expo push gateway. Failures are logged and dropped."""
import logging
from typing import Any, Dict, List, Optional

import requests
from fastapi import BackgroundTasks
from supabase import Client

from app.config import settings
from app.modules.notifications.service import NotificationService

logger = logging.getLogger(__name__)


def build_push_messages(tokens: List[str], title: str, body: str, data: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [
        {"to": token, "title": title, "body": body, "data": data or {}, "sound": "default"}
        for token in tokens
    ]


def send_push(tokens: List[str], title: str, body: str, data: Optional[Dict[str, Any]] = None) -> bool:
    """POST one batch to Expo. Returns True when the gateway accepted it."""
    if not tokens:
        return False
    try:
        response = requests.post(
            settings.expo_push_url,
            json=build_push_messages(tokens, title, body, data),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=settings.outbound_timeout_seconds,
        )
        if response.status_code >= 400:
            logger.warning(f"Expo push rejected ({response.status_code}): {response.text[:200]}")
            return False
        return True
    except requests.RequestException as e:
        logger.warning(f"Expo push failed: {e}")
        return False


def push_to_user(supabase: Client, user_id: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> bool:
    """Look up a user's tokens and push to all of them. Meant for BackgroundTasks."""
    try:
        tokens = NotificationService(supabase).get_push_tokens(user_id)
        if not tokens:
            logger.debug(f"No push tokens for user {user_id}")
            return False
        return send_push(tokens, title, body, data)
    except Exception as e:
        logger.error(f"Error pushing to user {user_id}: {e}")
        return False


def schedule_pushes(background_tasks: BackgroundTasks, supabase: Client, pushes: List[Dict[str, Any]]) -> None:
    """Queue push payloads produced by a service to run after the response is sent"""
    for push in pushes:
        background_tasks.add_task(
            push_to_user, supabase, push["user_id"], push["title"], push["body"], push.get("data")
        )
