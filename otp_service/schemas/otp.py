from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Purpose = Literal["verification", "login", "reset"]


class SendOtpRequest(BaseModel):
    phone_number: str = Field(min_length=1, max_length=32)
    purpose: Optional[Purpose] = None


class SendOtpResponse(BaseModel):
    success: bool
    message: str
    expires_in_seconds: int
    id: str
    otp: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    phone_number: str = Field(min_length=1, max_length=32)
    code: str
    purpose: Optional[Purpose] = None


class VerifyOtpResponse(BaseModel):
    success: bool
    message: str
    verified_at: Optional[datetime] = None


class ResendOtpRequest(BaseModel):
    phone_number: str = Field(min_length=1, max_length=32)
    purpose: Optional[Purpose] = None


class ResendOtpResponse(BaseModel):
    success: bool
    message: str
    expires_in_seconds: int
    otp: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    services: dict[str, str]
    version: str


class OtpRecordResponse(BaseModel):
    id: str
    phone_number: str
    purpose: Purpose
    is_verified: bool
    attempts: int
    max_attempts: int
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    verified_at: Optional[datetime] = None


class SweepResponse(BaseModel):
    deleted: int
