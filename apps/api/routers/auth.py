from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from reviewhub.db.crud import UserCRUD
from reviewhub.db.models import User, UserRole, UserStatus
from reviewhub.services import profiles

from ..core.auth import create_token, hash_password, verify_password
from ..core.deps import get_current_user, get_db
from ..core.serialize import envelope, serialize_user
from ..schemas.auth import LoginRequest, RegisterRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    user = profiles.register_user(
        db,
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.GUEST,
        profile_photo=body.profilePhoto,
        address=body.address,
    )
    db.commit()
    return TokenResponse(access_token=create_token(user.id, user.role.value))


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = UserCRUD.get_by_email(db, body.email)
    if (
        user is None
        or user.status != UserStatus.ACTIVE
        or not verify_password(body.password, user.password_hash)
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=create_token(user.id, user.role.value))


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return envelope("User retrieved successfully", serialize_user(current_user))
