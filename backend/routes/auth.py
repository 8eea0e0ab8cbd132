# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import AuditAction, write_log, client_ip
from models import users as models
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already used"
# Same answer for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"


# Register a new user
@router.post("/register", response_model=schemas.MessageResponse)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Exact match, the same rule the unique index enforces
    db_user = db.query(models.User).filter(models.User.email == user.email).first()
    if db_user:
        write_log(
            db,
            user_id=None,
            action=AuditAction.REGISTER,
            resource="auth",
            status="FAIL",
            ip=client_ip(request),
            meta={"email": user.email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=400, detail=EMAIL_TAKEN)

    # Create new user instance with hashed password; registration_date is set server side
    new_user = models.User(email=user.email, password_hash=get_password_hash(user.password), name=None)
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same email
        db.rollback()
        raise HTTPException(status_code=400, detail=EMAIL_TAKEN)
    db.refresh(new_user)

    logger.info(f"User {new_user.id} registered")
    write_log(
        db,
        user_id=new_user.id,
        action=AuditAction.REGISTER,
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"email": new_user.email},
        best_effort=True,
    )

    return {"message": "User registered successfully"}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(models.User).filter(models.User.email == payload.email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action=AuditAction.LOGIN, resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    access_token = create_access_token(db_user)

    write_log(db, user_id=db_user.id, action=AuditAction.LOGIN, resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
