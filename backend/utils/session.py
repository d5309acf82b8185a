# utils/session.py
from fastapi import Header, HTTPException, Request

from services.storage import KeyValueStorage


# Key-value storage shared by carts and wishlists, created in main.py
def get_storage(request: Request) -> KeyValueStorage:
    return request.app.state.storage


# Browsing session that owns the cart; the client generates and keeps it
def get_session_id(x_session_id: str = Header(..., alias="X-Session-Id")) -> str:
    session_id = x_session_id.strip()
    if not session_id or len(session_id) > 128:
        raise HTTPException(status_code=400, detail="Invalid X-Session-Id header")
    return session_id
