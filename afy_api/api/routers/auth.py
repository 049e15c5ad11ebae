from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from afy_api.api.deps import (
    get_current_identity,
    get_get_me_use_case,
    get_login_supabase_use_case,
    get_logout_session_use_case,
    get_refresh_session_use_case,
    get_signup_user_use_case,
)
from afy_api.api.schemas.auth import (
    AuthTokenResponse,
    AuthUserResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
    SignupResponse,
)
from afy_api.application.dto.auth import (
    AuthenticatedIdentity,
    AuthUserOutput,
    LoginSupabaseInput,
    LogoutInput,
    RefreshSessionInput,
    SignupUserInput,
)
from afy_api.application.use_cases.get_me import GetMeUseCase
from afy_api.application.use_cases.login_supabase import LoginSupabaseUseCase
from afy_api.application.use_cases.logout_session import LogoutSessionUseCase
from afy_api.application.use_cases.refresh_session import RefreshSessionUseCase
from afy_api.application.use_cases.signup_user import SignupUserUseCase
from afy_api.domain.exceptions import (
    AccountAlreadyExistsError,
    InvalidExternalTokenError,
    RefreshNotSupportedError,
    RefreshSessionInvalidError,
    SignupInputError,
    SignupRejectedError,
    UserNotFoundError,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

EMAIL_CONFIRMATION_MESSAGE = "Check your email to confirm your account"


def _user_response(user: AuthUserOutput) -> AuthUserResponse:
    return AuthUserResponse(id=user.id, email=user.email, name=user.name)


@router.post("/login", response_model=AuthTokenResponse, response_model_exclude_unset=True)
def login(
    req: LoginRequest | None = None,
    use_case: LoginSupabaseUseCase = Depends(get_login_supabase_use_case),
):
    if req is None or not req.supabase_token:
        raise HTTPException(status_code=400, detail="supabaseToken is required")

    try:
        output = use_case.execute(LoginSupabaseInput(supabase_token=req.supabase_token))
    except InvalidExternalTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid Supabase token") from exc
    except SQLAlchemyError as exc:
        logger.exception("auth_router: login_storage_error")
        raise HTTPException(status_code=500, detail="Authentication failed") from exc

    fields = {
        "user": _user_response(output.user),
        "access_token": output.access_token,
        "expires_in": output.expires_in,
    }
    if output.refresh_token is not None:
        fields["refresh_token"] = output.refresh_token
    return AuthTokenResponse(**fields)


@router.post(
    "/signup",
    status_code=201,
    response_model=SignupResponse,
    response_model_exclude_unset=True,
)
def signup(
    req: SignupRequest | None = None,
    use_case: SignupUserUseCase = Depends(get_signup_user_use_case),
):
    if req is None or not req.email or not req.password:
        raise HTTPException(status_code=400, detail="email and password are required")

    try:
        output = use_case.execute(
            SignupUserInput(
                email=req.email,
                password=req.password,
                name=req.name,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (SignupInputError, SignupRejectedError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("auth_router: signup_storage_error")
        raise HTTPException(status_code=500, detail="Signup failed") from exc

    if output.tokens is None:
        return SignupResponse(
            user=_user_response(output.user),
            email_sent=output.email_sent,
            message=EMAIL_CONFIRMATION_MESSAGE,
        )

    fields = {
        "user": _user_response(output.user),
        "access_token": output.tokens.access_token,
        "expires_in": output.tokens.expires_in,
    }
    if output.tokens.refresh_token is not None:
        fields["refresh_token"] = output.tokens.refresh_token
    return SignupResponse(**fields)


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    req: RefreshRequest | None = None,
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    if req is None or not req.refresh_token:
        raise HTTPException(status_code=400, detail="refreshToken is required")

    try:
        output = use_case.execute(RefreshSessionInput(refresh_token=req.refresh_token))
    except RefreshNotSupportedError as exc:
        raise HTTPException(status_code=404, detail="Not Found") from exc
    except RefreshSessionInvalidError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("auth_router: refresh_storage_error")
        raise HTTPException(status_code=500, detail="Token refresh failed") from exc

    return RefreshResponse(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        expires_in=output.expires_in,
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    output = use_case.execute(LogoutInput(identity=identity))
    return LogoutResponse(message=output.message)


@router.get("/me", response_model=MeResponse)
def me(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    try:
        output = use_case.execute(identity=identity)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("auth_router: me_storage_error")
        raise HTTPException(status_code=500, detail="Failed to get user info") from exc

    return MeResponse(
        id=output.id,
        email=output.email,
        name=output.name,
        created_at=output.created_at,
    )
