"""Authentication and account recovery routes."""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.accounts.reset_tokens import consume_reset_token, issue_reset_token
from app.accounts.validators import (
    validate_password,
    validate_security_answers,
    validate_username,
)
from app.assignments.engine import assign_next_checklist
from app.core.auth import get_current_user
from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.database import get_session
from app.core.security import (
    create_access_token,
    get_security_question,
    get_security_questions,
    hash_answer,
    hash_password,
    verify_answer,
    verify_password,
)
from app.models import User
from app.schemas.assignment import AssignmentOut
from app.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    ResetQuestionsRequest,
    UserOut,
    VerifyAnswersRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def create_user(session: Session, body: RegisterRequest, is_admin: bool = False) -> User:
    """Validate a registration payload and store the new user."""
    answers = [a.model_dump() for a in body.security_answers]
    for error in (
        validate_username(body.username),
        validate_password(body.password),
        validate_security_answers(answers),
    ):
        if error:
            raise HTTPException(status_code=400, detail=error)

    username = body.username.strip()
    if session.exec(select(User).where(User.username == username)).first():
        raise HTTPException(status_code=409, detail="Username already exists.")

    user = User(
        username=username,
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        password_hash=hash_password(body.password),
        security_question_1_id=answers[0]["question_id"],
        security_answer_1_hash=hash_answer(answers[0]["answer"]),
        security_question_2_id=answers[1]["question_id"],
        security_answer_2_hash=hash_answer(answers[1]["answer"]),
        is_admin=is_admin,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"User {user.username} registered")
    return user


@router.get("/security-questions")
async def security_questions():
    """List the security questions users can choose from."""
    return get_security_questions()


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, session: Session = Depends(get_session)):
    """
    Register a new (non-admin) user.

    Requires a 3-30 character username, a password of at least 8
    characters and answers to two different security questions. Returns
    409 if the username is taken.
    """
    user = create_user(session, body)
    return {"message": "User registered successfully.", "user_id": str(user.id)}


@router.post("/login")
async def login(body: LoginRequest, session: Session = Depends(get_session)):
    """
    Log in and receive a session token.

    On success the rotation engine runs for the user, so the response
    already carries their current assignment (None for admins or when no
    checklist is available).
    """
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required.")

    user = session.exec(select(User).where(User.username == body.username)).first()
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    assignment = assign_next_checklist(session, user)
    token = create_access_token(user)
    logger.info(f"User {user.username} logged in")

    return {
        "message": "Login successful.",
        "access_token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(user).model_dump(mode="json"),
        "assignment": (
            AssignmentOut.model_validate(assignment).model_dump(mode="json")
            if assignment
            else None
        ),
    }


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    """Return the user the bearer token belongs to."""
    return current_user


@router.post("/request-password-reset-questions")
async def request_password_reset_questions(
    body: ResetQuestionsRequest, session: Session = Depends(get_session)
):
    """Step 1 of recovery: return the user's two security questions."""
    if not body.username:
        raise HTTPException(status_code=400, detail="Username is required.")

    user = session.exec(select(User).where(User.username == body.username)).first()
    if not user:
        raise HTTPException(
            status_code=404, detail="User not found or unable to reset password."
        )

    q1 = get_security_question(user.security_question_1_id)
    q2 = get_security_question(user.security_question_2_id)
    if not q1 or not q2:
        logger.error(f"User {user.username} has invalid security question ids")
        raise HTTPException(
            status_code=500,
            detail="Error retrieving security questions configuration for user.",
        )

    return {
        "username": user.username,
        "questions": [
            {"question_id": q1["id"], "text": q1["text"]},
            {"question_id": q2["id"], "text": q2["text"]},
        ],
    }


@router.post("/verify-security-answers")
async def verify_security_answers(
    body: VerifyAnswersRequest, session: Session = Depends(get_session)
):
    """
    Step 2 of recovery: check both answers and issue a reset token.

    After too many failed attempts the account is locked out of recovery
    for a while (429). A successful check clears the attempt counter.
    """
    if not body.username or len(body.answers) != 2:
        raise HTTPException(status_code=400, detail="Username and two answers are required.")

    user = session.exec(select(User).where(User.username == body.username)).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")

    now = utcnow()
    lockout = timedelta(minutes=settings.reset_lockout_minutes)
    if user.password_reset_attempt_count >= settings.reset_max_attempts:
        last_attempt = user.last_password_reset_attempt
        if last_attempt and now - as_utc(last_attempt) < lockout:
            raise HTTPException(
                status_code=429,
                detail="Too many attempts. Please try again later.",
            )
        user.password_reset_attempt_count = 0

    correct = set()
    for answer in body.answers:
        if answer.question_id == user.security_question_1_id and verify_answer(
            answer.answer, user.security_answer_1_hash
        ):
            correct.add(1)
        elif answer.question_id == user.security_question_2_id and verify_answer(
            answer.answer, user.security_answer_2_hash
        ):
            correct.add(2)

    if correct != {1, 2}:
        user.password_reset_attempt_count += 1
        user.last_password_reset_attempt = now
        session.add(user)
        session.commit()
        logger.warning(f"Incorrect security answers for user {user.username}")
        raise HTTPException(status_code=401, detail="Incorrect security answers.")

    user.password_reset_attempt_count = 0
    user.last_password_reset_attempt = None
    session.add(user)
    session.commit()

    token = issue_reset_token(session, user.username)
    return {"message": "Security questions verified.", "password_reset_token": token}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, session: Session = Depends(get_session)):
    """Step 3 of recovery: set a new password using the reset token."""
    if not body.username or not body.password_reset_token or not body.new_password:
        raise HTTPException(
            status_code=400,
            detail="Username, reset token, and new password are required.",
        )
    error = validate_password(body.new_password)
    if error:
        raise HTTPException(status_code=400, detail=error)

    if not consume_reset_token(session, body.username, body.password_reset_token):
        raise HTTPException(status_code=401, detail="Invalid or expired password reset token.")

    user = session.exec(select(User).where(User.username == body.username)).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")

    user.password_hash = hash_password(body.new_password)
    user.password_reset_attempt_count = 0
    user.last_password_reset_attempt = None
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    logger.info(f"Password reset for user {user.username}")

    return {"message": "Password has been reset successfully."}
