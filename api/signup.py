"""Signup API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from api.schemas import ApiResponse, ResendRequest, SignupRequest, SignupUser, VerifyRequest
from signup.dependencies import enforce_signup_rate_limit, get_registration_service
from signup.exceptions import NotificationError
from signup.services.registration_service import RegistrationService

router = APIRouter()


@router.get("/availability", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def availability(
    email: str = Query(min_length=3, max_length=320),
    registration: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    result = await registration.check_availability(email)
    return ApiResponse(
        success=True,
        message=result.message or "Email is available",
        data={
            "status": result.status.value,
            "can_sign_up": result.can_sign_up,
            "minutes_remaining": result.minutes_remaining,
        },
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_202_ACCEPTED)
async def signup(
    payload: SignupRequest,
    _: None = Depends(enforce_signup_rate_limit),
    registration: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    try:
        await registration.initiate(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            confirm=payload.confirm_password,
        )
    except NotificationError:
        # The pending record exists, so the user can still request a resend
        return ApiResponse(
            success=True,
            message="Signup pending, but the verification email could not be sent. Please request a new code.",
            data={"email": payload.email, "notification_failed": True},
        )

    return ApiResponse(
        success=True,
        message="Verification code sent to your email",
        data={"email": payload.email, "notification_failed": False},
    )


@router.post("/resend", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def resend(
    payload: ResendRequest,
    registration: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    await registration.resend(payload.email)
    return ApiResponse(success=True, message="A new verification code was sent", data={"email": payload.email})


@router.post("/verify", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def verify(
    payload: VerifyRequest,
    registration: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    user = await registration.complete(payload.email, payload.otp)
    return ApiResponse(
        success=True,
        message="Email verified. Your account is ready.",
        data={"user": SignupUser(id=user.get("id"), email=user["email"], name=user.get("name")).model_dump()},
    )
