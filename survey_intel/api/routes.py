# survey_intel/api/routes.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from survey_intel.auth.context import RequestContext, require_user
from survey_intel.auth.jwt import create_access_token, get_password_hash, verify_password
from survey_intel.db.session import get_db
from survey_intel.schemas.auth import Token
from survey_intel.schemas.user import UserCreate, UserOut, UserStats
from survey_intel.services import storage

router = APIRouter(prefix="/api", tags=["Auth"])

@router.post("/register", response_model=UserOut, status_code=201)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    """Create a new user"""
    existing = storage.get_user_by_username(db, user_in.username)
    if existing:
        raise HTTPException(status_code=400, detail="Username already exists")

    return storage.create_user(db, user_in.username, get_password_hash(user_in.password))

@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Authenticate user and return JWT"""
    user = storage.get_user_by_username(db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    token = create_access_token(subject=user.username)
    return {"access_token": token, "token_type": "bearer"}

@router.get("/user", response_model=UserOut)
def current_user(ctx: RequestContext = Depends(require_user)):
    return ctx.user

@router.get("/user/stats", response_model=UserStats)
def user_stats(ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    """Responses received and analyses generated across the caller's surveys"""
    return storage.get_user_stats(db, ctx.user_id)
