# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import write_log
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(tags=["Auth"])

def _client_ip(request: Request):
    return request.client.host if request and request.client else None

# Register a new customer and log them in
@router.post("/register", response_model=schemas.Token)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    name = user.name.strip()
    phone = user.phone.strip()

    # Check for an existing (name, phone) pair
    existing = db.query(User).filter(User.name == name, User.phone == phone).first()
    if existing:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=_client_ip(request), meta={"name": name, "reason": "User exists"})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Name and phone already registered")

    new_user = User(name=name, phone=phone, email=user.email)
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Name and phone already registered")
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=_client_ip(request), meta={"name": new_user.name})

    access_token = create_access_token(data={"sub": str(new_user.id)})
    return {"access_token": access_token, "token_type": "bearer"}


# Authenticate by exact name + phone and issue a JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(
        User.name == payload.name.strip(), User.phone == payload.phone.strip()
    ).first()

    if not db_user:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=_client_ip(request), meta={"name": payload.name})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid name or phone")

    access_token = create_access_token(data={"sub": str(db_user.id)})
    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=_client_ip(request), meta={"name": db_user.name})

    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
