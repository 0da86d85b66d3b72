# vetms/models/settings.py

from pydantic import BaseModel


class SettingIn(BaseModel):
    value: str


class SettingOut(BaseModel):
    key: str
    value: str
