from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from .schemas import (
    AssignRequest,
    MessageResponse,
    NearbyProfessional,
    TeamMemberResponse,
    UpsertUserRequest,
    UserProfile,
)
from .store import DirectoryStore
from ..core.auth import require_api_key

router = APIRouter(dependencies=[Depends(require_api_key)])

def get_store(request: Request) -> DirectoryStore:
    return request.app.state.store

@router.get("/users/{user_id}", response_model=UserProfile)
async def read_user(user_id: str, store: DirectoryStore = Depends(get_store)):
    user = store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.put("/users/{user_id}", response_model=UserProfile)
async def upsert_user(user_id: str, req: UpsertUserRequest, store: DirectoryStore = Depends(get_store)):
    return store.upsert_user(user_id, req.model_dump())

@router.get("/professionals/nearby", response_model=List[NearbyProfessional])
async def nearby_professionals(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    radius: float = 50,
    category: Optional[str] = None,
    sub_category: Optional[str] = None,
    store: DirectoryStore = Depends(get_store),
):
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="Latitude and Longitude are required")
    if radius <= 0:
        raise HTTPException(status_code=400, detail="radius must be positive")
    cat = None if category in (None, "", "All") else category
    sub = None if sub_category in (None, "", "All") else sub_category
    return store.nearby(lat, lon, radius, cat, sub)

@router.post("/projects/{project_id}/assign", response_model=MessageResponse)
async def assign_professional(project_id: str, req: AssignRequest, store: DirectoryStore = Depends(get_store)):
    if store.get_user(req.userId) is None:
        raise HTTPException(status_code=404, detail="User not found")
    store.assign(project_id, req.userId, req.role)
    return MessageResponse(message="Professional assigned successfully")

@router.get("/projects/{project_id}/team", response_model=List[TeamMemberResponse])
async def read_team(project_id: str, store: DirectoryStore = Depends(get_store)):
    return store.team(project_id)

@router.delete("/projects/{project_id}/team/{user_id}", response_model=MessageResponse)
async def remove_team_member(project_id: str, user_id: str, store: DirectoryStore = Depends(get_store)):
    if not store.remove_member(project_id, user_id):
        raise HTTPException(status_code=404, detail="User is not assigned to this project")
    return MessageResponse(message="Team member removed successfully")
