"""
Account and session endpoints, mounted under /api/user.

POST /register             — create/refresh an unverified account, send a code
POST /otpverification      — verify the code, start a session
POST /login                — password login, start a session
POST /logout               — clear the session cookie
POST /forgotPassword       — email a reset-password link
POST /resetPassword/{token} — set a new password from a reset link
GET  /check                — report the account behind the session cookie
GET  /googleLogin          — sign in with a Google auth code
GET  /googleRegister       — sign up with a Google auth code

Each handler catches AppError and answers with the status code its
endpoint has always used; the frontend branches on those codes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from dependencies import get_auth_service, get_session_service
from errors import AppError, ConfigurationError, DispatchError, error_response
from schemas.dto.requests.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.auth import AccountReply, MessageResponse, SessionResponse
from schemas.dto.responses.common import ErrorResponse
from schemas.models.account import AccountDoc
from services.auth_service import AuthService
from services.session_service import SessionService
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/user", tags=["auth"])


def _session_response(
    sessions: SessionService,
    account: AccountDoc,
    token: str,
    message: str,
    status_code: int = 201,
) -> JSONResponse:
    body = SessionResponse(user=AccountReply.from_account(account), message=message)
    response = JSONResponse(
        status_code=status_code, content=body.model_dump(by_alias=True)
    )
    sessions.set_cookie(response, token)
    return response


def _message(message: str, *, success: Optional[bool] = True) -> dict:
    return MessageResponse(success=success, message=message).model_dump(
        exclude_none=True
    )


@router.post("/register", responses={400: {"model": ErrorResponse}})
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        message = await auth.register(
            name=body.name,
            email=body.email,
            password=body.password,
            phone=body.phone,
            method=body.verification_method,
        )
    except (DispatchError, ConfigurationError) as exc:
        log.error("register_dispatch_failed", error=exc.message, email=body.email)
        return error_response(exc, 500)
    except AppError as exc:
        return error_response(exc, 400)
    return _message(message)


@router.post(
    "/otpverification", status_code=201, responses={401: {"model": ErrorResponse}}
)
async def verify_otp(
    body: VerifyOtpRequest,
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionService = Depends(get_session_service),
):
    try:
        account, token = await auth.verify_otp(
            email=body.email, phone=body.phone, otp=body.otp
        )
    except AppError as exc:
        return error_response(exc, 401)
    return _session_response(sessions, account, token, "OTP is verified!")


@router.post("/login", status_code=201, responses={500: {"model": ErrorResponse}})
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionService = Depends(get_session_service),
):
    try:
        account, token = await auth.login(email=body.email, password=body.password)
    except AppError as exc:
        return error_response(exc, 500)
    return _session_response(sessions, account, token, "Login successfully")


@router.post("/logout")
async def logout(
    response: Response,
    sessions: SessionService = Depends(get_session_service),
):
    sessions.clear_cookie(response)
    return _message("Logged out successfully")


@router.post("/forgotPassword", responses={400: {"model": ErrorResponse}})
async def forgot_password(
    body: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        message = await auth.forgot_password(email=body.email)
    except AppError as exc:
        return error_response(exc, 400)
    return _message(message)


@router.post("/resetPassword/{token}", responses={400: {"model": ErrorResponse}})
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        await auth.reset_password(
            token=token,
            password=body.password,
            confirm_password=body.confirm_password,
        )
    except AppError as exc:
        return error_response(exc, 400)
    return _message("Password updated successfully", success=None)


@router.get("/check")
async def check(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
):
    try:
        account = await sessions.authenticate(
            request.cookies.get(sessions.cookie_name)
        )
    except AppError as exc:
        return error_response(exc, 401, key="message")
    body = SessionResponse(
        user=AccountReply.from_account(account), message="Valid user"
    )
    return body.model_dump(by_alias=True)


async def _google_flow(flow, sessions: SessionService, message: str) -> JSONResponse:
    try:
        account, token = await flow
    except Exception as exc:
        # Token exchange failures surface as authlib/httpx errors, not AppError
        error = exc.message if isinstance(exc, AppError) else str(exc)
        log.warning("google_auth_failed", error=error, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "error": error},
        )
    return _session_response(sessions, account, token, message)


@router.get("/googleLogin", status_code=201)
async def google_login(
    code: str = Query(...),
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionService = Depends(get_session_service),
):
    return await _google_flow(
        auth.google_login(code=code), sessions, "Login successfully"
    )


@router.get("/googleRegister", status_code=201)
async def google_register(
    code: str = Query(...),
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionService = Depends(get_session_service),
):
    return await _google_flow(
        auth.google_register(code=code), sessions, "Registered successfully"
    )
