import math
from typing import Dict, List, Optional, Tuple

# NOTE: In-memory directory for local development and end-to-end tests.
# The production directory computes the same great-circle distance inside its SQL query.

EARTH_RADIUS_KM = 6371.0
NEARBY_LIMIT = 50


def great_circle_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dlon = math.radians(lon2 - lon1)
    cos_angle = math.cos(p1) * math.cos(p2) * math.cos(dlon) + math.sin(p1) * math.sin(p2)
    # rounding can push identical points just past 1.0
    return EARTH_RADIUS_KM * math.acos(max(-1.0, min(1.0, cos_angle)))


class DirectoryStore:
    def __init__(self):
        self.users: Dict[str, dict] = {}
        # (project_id, user_id) -> assignment
        self.assignments: Dict[Tuple[str, str], dict] = {}

    def upsert_user(self, user_id: str, fields: dict) -> dict:
        user = self.users.setdefault(str(user_id), {"user_id": str(user_id)})
        user.update({k: v for k, v in fields.items() if v is not None})
        return user

    def get_user(self, user_id: str) -> Optional[dict]:
        return self.users.get(str(user_id))

    def nearby(
        self,
        lat: float,
        lon: float,
        radius_km: float,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> List[dict]:
        rows = []
        for u in self.users.values():
            if u.get("latitude") is None or u.get("longitude") is None:
                continue
            if category and u.get("category") != category:
                continue
            if sub_category and u.get("sub_category") != sub_category:
                continue
            distance = great_circle_km(lat, lon, float(u["latitude"]), float(u["longitude"]))
            if distance < radius_km:
                rows.append({**u, "distance": distance})
        rows.sort(key=lambda r: r["distance"])
        return rows[:NEARBY_LIMIT]

    def assign(self, project_id: str, user_id: str, role: Optional[str]) -> dict:
        # re-assigning refreshes the role and puts the invite back to pending
        key = (str(project_id), str(user_id))
        row = {"project_id": str(project_id), "user_id": str(user_id), "assigned_role": role, "status": "Pending"}
        self.assignments[key] = row
        return row

    def team(self, project_id: str) -> List[dict]:
        members = []
        for (pid, uid), a in self.assignments.items():
            if pid != str(project_id):
                continue
            u = self.users.get(uid, {})
            members.append(
                {
                    "user_id": uid,
                    "name": u.get("name"),
                    "category": u.get("category"),
                    "sub_category": u.get("sub_category"),
                    "assigned_role": a.get("assigned_role"),
                    "status": a.get("status"),
                }
            )
        return members

    def remove_member(self, project_id: str, user_id: str) -> bool:
        return self.assignments.pop((str(project_id), str(user_id)), None) is not None
