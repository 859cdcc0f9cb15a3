from pydantic import BaseModel
from typing import Optional

class User(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    preferences: Optional[dict] = None
