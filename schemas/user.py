from pydantic import BaseModel
from typing import Optional


class UserOut(BaseModel):
    id: int
    name: Optional[str] = None
