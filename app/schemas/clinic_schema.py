from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class ClinicBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None


class ClinicCreate(ClinicBase):
    pass


class ClinicWithPackageCreate(ClinicBase):
    package_id: int


class ClinicUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class Clinic(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClinicSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
