"""Widget schemas - Pydantic models for widget request/response validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ApiKeyCreate(BaseModel):
    name: Optional[str] = None


class ApiKeyResponse(BaseModel):
    id: int
    name: Optional[str] = None
    key: str
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WidgetSettingsUpdate(BaseModel):
    primaryColor: Optional[str] = None
    secondaryColor: Optional[str] = None
    textColor: Optional[str] = None
    fontFamily: Optional[str] = None
    borderRadius: Optional[str] = None
    layout: Optional[str] = None
    logoUrl: Optional[str] = None
    headerText: Optional[str] = None
    buttonStyle: Optional[str] = None
    darkMode: Optional[bool] = None
    calendarStyle: Optional[str] = None
    features: Optional[dict[str, bool]] = None


SETTINGS_FIELDS = {
    "primaryColor": "primary_color",
    "secondaryColor": "secondary_color",
    "textColor": "text_color",
    "fontFamily": "font_family",
    "borderRadius": "border_radius",
    "layout": "layout",
    "logoUrl": "logo_url",
    "headerText": "header_text",
    "buttonStyle": "button_style",
    "darkMode": "dark_mode",
    "calendarStyle": "calendar_style",
    "features": "features",
}


class WidgetSettingsResponse(BaseModel):
    business_id: int
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    text_color: Optional[str] = None
    font_family: Optional[str] = None
    border_radius: Optional[str] = None
    layout: Optional[str] = None
    logo_url: Optional[str] = None
    header_text: Optional[str] = None
    button_style: Optional[str] = None
    dark_mode: Optional[bool] = None
    calendar_style: Optional[str] = None
    features: Optional[dict[str, Any]] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenRequest(BaseModel):
    apiKey: Optional[str] = None
    customization: Optional[dict[str, Any]] = None


class SignatureRequest(BaseModel):
    apiKey: Optional[str] = None
    signature: Optional[str] = None
    payload: Any = None


class BookingStepRequest(BaseModel):
    """One wizard transition: the current state plus the fields entered on this step"""

    state: Optional[dict[str, Any]] = None
    data: Optional[dict[str, Any]] = None
    action: Optional[str] = "next"  # next, back
