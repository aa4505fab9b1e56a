from pydantic import BaseModel, Field
from typing import Optional

class UserProfile(BaseModel):
    user_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class UpsertUserRequest(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    experience_years: Optional[int] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    resume_path: Optional[str] = None
    portfolio_url: Optional[str] = None

class NearbyProfessional(BaseModel):
    user_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    experience_years: Optional[int] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    resume_path: Optional[str] = None
    portfolio_url: Optional[str] = None
    latitude: float
    longitude: float
    rating: float = 0.0
    distance: float

class AssignRequest(BaseModel):
    userId: str
    role: Optional[str] = None

class MessageResponse(BaseModel):
    message: str

class TeamMemberResponse(BaseModel):
    user_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    assigned_role: Optional[str] = None
    status: Optional[str] = None
