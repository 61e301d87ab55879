from pydantic import BaseModel


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    profilePhoto: str | None = None
    contactNumber: str | None = None
    address: str | None = None
