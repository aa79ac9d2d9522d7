from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from notes_drive.errors import AuthError
from notes_drive.models.auth import CurrentUser, LoginRequest, RegisterRequest, TokenResponse
from notes_drive.utils.jwt_auth import Identity, get_current_user, get_token

router = APIRouter(prefix="/auth", tags=["auth"])


def _identity(request: Request) -> Identity:
    return request.app.state.identity


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=CurrentUser)
def register(req: RegisterRequest, identity: Identity = Depends(_identity)) -> CurrentUser:
    try:
        rec = identity.register(req.user_id, req.password)
    except FileExistsError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User exists")
    except ValueError:
        raise HTTPException(status_code=422, detail="Invalid user_id")
    return CurrentUser(user_id=rec.user_id)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, identity: Identity = Depends(_identity)) -> TokenResponse:
    try:
        token = identity.login(req.user_id, req.password)
    except (AuthError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=token)


@router.get("/me", response_model=CurrentUser)
def me(user_id: str = Depends(get_current_user)) -> CurrentUser:
    return CurrentUser(user_id=user_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, token: str = Depends(get_token)) -> None:
    try:
        user_id = request.app.state.identity.sign_out(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    request.app.state.sessions.drop(user_id)
    return None
