import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from synapse.verification.otp import OTPService, normalize_email

from backend.app.api.schemas import (
    CredentialsRequest,
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    ResetPasswordRequest,
    SendVerificationRequest,
    TutorialResponse,
    VerifyEmailRequest,
)
from backend.app.config import AppConfig
from backend.app.db.models import History, User
from backend.app.dependencies import (
    get_config,
    get_current_user,
    get_db,
    get_otp_service,
    get_token_service,
)
from backend.app.errors import AppError, ErrorType
from backend.app.services.auth_service import (
    TokenService,
    hash_password,
    is_valid_email,
    verify_password,
)

logger = logging.getLogger("synapse.users")

router = APIRouter()


def _find_user(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def _require_development(config: AppConfig) -> None:
    if not config.is_development:
        raise AppError(
            "This action is only available in development mode",
            403,
            ErrorType.AUTHORIZATION,
        )


@router.post("/", status_code=201, response_model=RegisterResponse)
def register_user(
    request: CredentialsRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    otp: OTPService = Depends(get_otp_service),
    config: AppConfig = Depends(get_config),
):
    if not request.email or not request.password:
        raise AppError("Email and password are required", 400, ErrorType.VALIDATION)
    if not is_valid_email(request.email):
        raise AppError("Please enter a valid email address", 400, ErrorType.VALIDATION)

    email = normalize_email(request.email)
    if _find_user(db, email) is not None:
        raise AppError("User already exists", 400, ErrorType.CONFLICT)

    if config.require_email_verification and not otp.is_verified(email):
        raise AppError(
            "Please verify your email before registering",
            403,
            ErrorType.AUTHORIZATION,
        )

    user = User(email=email, password_hash=hash_password(request.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppError("User already exists", 400, ErrorType.CONFLICT)
    otp.consume_verification(email)
    logger.info("[users] registered %s", user.id)

    return RegisterResponse(
        message="User registered successfully.",
        email=user.email,
        token=tokens.create(user.id),
        hasSeenTutorial=user.has_seen_tutorial,
    )


@router.post("/login", response_model=LoginResponse)
def login_user(
    request: CredentialsRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = _find_user(db, request.email) if request.email else None
    if user is None or not verify_password(request.password, user.password_hash):
        raise AppError("Invalid email or password", 401, ErrorType.AUTHENTICATION)

    return LoginResponse(
        id=user.id,
        email=user.email,
        token=tokens.create(user.id),
        hasSeenTutorial=user.has_seen_tutorial,
    )


@router.delete("/profile", response_model=MessageResponse)
def delete_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    db.execute(delete(History).where(History.user_id == user.id))
    db.delete(user)
    db.commit()
    return MessageResponse(message="User removed")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    request: ResetPasswordRequest,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    _require_development(config)
    if not request.email or not request.newPassword:
        raise AppError("Email and new password are required.", 400, ErrorType.VALIDATION)

    user = _find_user(db, request.email)
    if user is None:
        raise AppError("User not found.", 404, ErrorType.NOT_FOUND)

    user.password_hash = hash_password(request.newPassword)
    db.commit()
    return MessageResponse(message="Password has been reset successfully.")


@router.patch("/tutorial", response_model=TutorialResponse)
def mark_tutorial_seen(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user.has_seen_tutorial = True
    db.commit()
    return TutorialResponse(message="Tutorial marked as seen", hasSeenTutorial=True)


@router.post("/send-verification", response_model=MessageResponse)
def send_verification(
    request: SendVerificationRequest,
    otp: OTPService = Depends(get_otp_service),
):
    if not request.email:
        raise AppError("Email is required", 400, ErrorType.VALIDATION)
    if not is_valid_email(request.email):
        raise AppError("Please enter a valid email address", 400, ErrorType.VALIDATION)

    result = otp.request_code(request.email)
    if not result.success:
        raise AppError(result.message, 500, ErrorType.NETWORK)
    return MessageResponse(message=result.message)


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(
    request: VerifyEmailRequest,
    otp: OTPService = Depends(get_otp_service),
):
    if not request.email or not request.otp:
        raise AppError("Email and OTP are required", 400, ErrorType.VALIDATION)

    result = otp.verify_code(request.email, request.otp)
    if not result.success:
        raise AppError(result.message, 400, ErrorType.VALIDATION)
    return MessageResponse(message=result.message)


@router.delete("/clear-all", response_model=MessageResponse)
def clear_all_users(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    _require_development(config)
    db.execute(delete(History))
    db.execute(delete(User))
    db.commit()
    logger.warning("[users] all users and history cleared")
    return MessageResponse(message="All users and their data have been cleared")
