"""
Embed Link Utility
Encodes widget settings into a shareable link and decodes them back.
"""
import base64
import binascii
import json
from dataclasses import fields
from typing import Optional
from urllib.parse import quote, unquote
from data.models import EmbedSettings
from utils.config_manager import config
from utils.logger import logger

# JSON keys used in the link payload
_KEYS = {
    "page_id": "pageId",
    "theme": "theme",
    "widget_bg": "widgetBg",
    "widget_color": "widgetColor",
    "input_width": "inputWidth",
    "input_border": "inputBorder",
    "timer_color": "timerColor",
    "timer_font_size": "timerFontSize",
    "task_database_id": "taskDatabaseId",
    "session_database_id": "sessionDatabaseId",
    "task_id": "taskId",
    "task_title": "taskTitle",
    "user_id": "userId",
}


def build_embed_link(origin: Optional[str], settings: EmbedSettings) -> str:
    """Link to the widget page carrying settings as base64 JSON in ?c=.

    A None origin means the configured embed.origin.
    """
    origin = origin or config.get('embed.origin', 'http://localhost:3000')
    payload = {_KEYS[k]: v for k, v in settings.to_dict().items() if v not in ("", None)}
    encoded = base64.b64encode(json.dumps(payload).encode()).decode()
    return f"{origin.rstrip('/')}/embed/widget?c={quote(encoded, safe='')}"


def parse_embed_config(value: Optional[str]) -> Optional[EmbedSettings]:
    """
    Decode the c= parameter of an embed link.

    Accepts standard, URL-safe and unpadded base64. Returns None for
    anything that does not decode to a JSON object.
    """
    if not value:
        return None
    text = unquote(value).strip().replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    try:
        data = json.loads(base64.b64decode(text).decode())
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        logger.debug(f"Invalid embed config: {e}")
        return None
    if not isinstance(data, dict):
        return None

    reverse = {v: k for k, v in _KEYS.items()}
    known = {f.name for f in fields(EmbedSettings)}
    kwargs = {}
    for key, val in data.items():
        name = reverse.get(key, key)
        if name in known:
            kwargs[name] = val
    return EmbedSettings(**kwargs)
