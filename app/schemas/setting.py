# app/schemas/setting.py
from typing import Optional
from pydantic import BaseModel
from datetime import datetime

class SettingRead(BaseModel):
    savings_percent: int
    # True when the user has never saved a preference
    is_default: bool = False
    updated_at: Optional[datetime] = None

class SettingUpdate(BaseModel):
    # Range is checked by the ledger so the error reads like the others
    savings_percent: int

class SettingUpdateResult(BaseModel):
    setting: SettingRead
    message: str
