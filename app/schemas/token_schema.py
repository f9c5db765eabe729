from pydantic import BaseModel
from typing import List, Optional
from app.schemas.clinic_schema import ClinicSummary


class LoginRequest(BaseModel):
    # Staff sign in with either their e-mail or phone number
    email_or_phone: Optional[str] = None
    password: Optional[str] = None


class SelectClinicRequest(LoginRequest):
    clinic_id: int


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: int
    full_name: str
    email: Optional[str] = None
    role: str
    clinic_id: Optional[int] = None
    clinics: List[ClinicSummary] = []


class TokenData(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    clinic_id: Optional[int] = None
    name: Optional[str] = None
