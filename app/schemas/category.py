from typing import Optional
from pydantic import BaseModel


class CategoryOut(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    responsible_entity: Optional[str] = None
    is_active: bool
