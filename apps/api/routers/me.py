from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from reviewhub.services import Actor, profiles

from ..core.deps import get_current_actor, get_db
from ..core.serialize import envelope, serialize_profile
from ..schemas.user import UpdateProfileRequest

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/profile")
def get_my_profile(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    profile = profiles.get_profile(db, actor.user_id)
    return envelope("Profile retrieved successfully", serialize_profile(profile))


@router.patch("/profile")
def update_my_profile(
    body: UpdateProfileRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    profile = profiles.update_profile(
        db,
        actor.user_id,
        name=body.name,
        profile_photo=body.profilePhoto,
        contact_number=body.contactNumber,
        address=body.address,
    )
    db.commit()
    return envelope("Profile updated successfully", serialize_profile(profile))
