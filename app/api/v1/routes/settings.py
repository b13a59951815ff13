# app/api/v1/routes/settings.py
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
import logging

from app.schemas.setting import SettingRead, SettingUpdate, SettingUpdateResult
from app.crud.setting import get_setting_for_user, upsert_setting_for_user
from app.core.config import settings as app_settings
from app.core.database import get_async_session, AsyncSessionLocal
from app.core.auth import User
from app.api import deps
from app.utils.ledger import LedgerValidationError, validate_percent
from app.utils.realtime import SettingsChangeHub, get_settings_hub

router = APIRouter(prefix="/settings", tags=["Settings"])
logger = logging.getLogger(__name__)


@router.get("", response_model=SettingRead)
async def read_settings(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(deps.get_current_user),
):
    """Current savings percentage; the default applies until the user saves one."""
    setting = await get_setting_for_user(user.id, db)
    if setting is None:
        return SettingRead(savings_percent=app_settings.DEFAULT_SAVINGS_PERCENT, is_default=True)
    return SettingRead(savings_percent=setting.savings_percent, updated_at=setting.updated_at)


@router.put("", response_model=SettingUpdateResult)
async def update_settings(
    setting_in: SettingUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(deps.get_current_user),
    hub: SettingsChangeHub = Depends(get_settings_hub),
):
    """
    Save the savings percentage (5-50).

    Only future allowances use the new rate; existing savings are untouched.
    Subscribers of the settings feed receive an INSERT or UPDATE event.
    """
    user_id = user.id
    try:
        percent = validate_percent(setting_in.savings_percent)
    except LedgerValidationError as e:
        logger.warning(f"Rejected savings percent {setting_in.savings_percent} for user {user_id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    try:
        setting, created = await upsert_setting_for_user(user_id, percent, db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error updating savings percent for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update savings preference."
        )

    await hub.publish(
        user_id,
        "INSERT" if created else "UPDATE",
        {
            "user_id": setting.user_id,
            "savings_percent": setting.savings_percent,
            "updated_at": setting.updated_at,
        },
    )
    logger.info(f"Savings percent for user {user_id} set to {percent}%")

    return SettingUpdateResult(
        setting=SettingRead(savings_percent=setting.savings_percent, updated_at=setting.updated_at),
        message=f"✅ Savings preference updated to {percent}%",
    )


@router.websocket("/ws")
async def settings_feed(
    websocket: WebSocket,
    token: str = Query(...),
):
    """Push INSERT/UPDATE events for the caller's settings row until the socket closes."""
    async with AsyncSessionLocal() as db:
        try:
            user = await deps.get_current_user_from_token(token, db)
        except HTTPException:
            await websocket.close(code=4001, reason="Authentication failed")
            return
        user_id = user.id

    hub: SettingsChangeHub = websocket.app.state.settings_hub
    await websocket.accept()
    hub.subscribe(websocket, user_id)

    try:
        # Keep the connection open; clients may send pings
        while True:
            await websocket.receive_text()
            await websocket.send_json({"status": "received", "timestamp": datetime.now().isoformat()})
    except WebSocketDisconnect:
        pass
    finally:
        hub.unsubscribe(websocket, user_id)
