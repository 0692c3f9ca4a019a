# src/parley_stage/schemas/verify.py
"""Verification-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class VerifyResponse(BaseModel):
    """Tells the client whether its next post must carry a CAPTCHA token."""

    captcha_required: bool = Field(..., alias="captchaRequired")

    model_config = ConfigDict(populate_by_name=True)
