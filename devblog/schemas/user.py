from pydantic import Field
from devblog.schemas.common import CamelModel


class UserBase(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)


class UserCreate(UserBase):
    password: str = Field(..., min_length=1, description="Password hash")


class UserResponse(UserBase):
    id: int


class UserInDB(UserResponse):
    password: str
