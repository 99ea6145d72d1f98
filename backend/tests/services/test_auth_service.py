"""AuthService: registration, throttled login and email verification."""

import pytest

from app.auth import decode_access_token
from app.core.exceptions import (
    ConflictException,
    ForbiddenException,
    RateLimitException,
    UnauthorizedException,
    ValidationException,
)
from app.schemas.auth import UserCreate
from app.services.auth_service import AuthService
from app.services.email import EmailService
from app.services.email_console import ConsoleEmailService
from app.services.otp_service import OTPService
from app.services.otp_store import otp_key

PASSWORD = "Password123"
IP = "203.0.113.7"


class BrokenTransport(ConsoleEmailService):
    def send_email(self, to_email, subject, html_content, text_content):
        raise ConnectionError("provider unavailable")


@pytest.fixture
def service(db, otp_store, email_service):
    return AuthService(db, OTPService(otp_store), email_service=email_service)


def _registration(email="new@example.com", **overrides):
    data = {"email": email, "password": "S3cure-pass", "first_name": " Nia ", "last_name": "Ng"}
    data.update(overrides)
    return UserCreate(**data)


class TestRegister:
    def test_creates_unverified_student(self, service):
        user = service.register_student(_registration("New@Example.com"))
        assert user.email == "new@example.com"
        assert user.role == "student"
        assert user.email_verified is False
        assert user.first_name == "Nia"
        assert user.hashed_password != "S3cure-pass"

    def test_duplicate_email(self, service, student):
        with pytest.raises(ConflictException) as exc_info:
            service.register_student(_registration(student.email.upper()))
        assert exc_info.value.code == "EMAIL_EXISTS"


class TestAuthenticate:
    def test_success_returns_bearer_token(self, service, student):
        result = service.authenticate(student.email, PASSWORD, IP)
        assert result["token_type"] == "bearer"
        claims = decode_access_token(result["access_token"])
        assert claims["sub"] == student.email

    def test_wrong_password_reports_remaining(self, service, student):
        with pytest.raises(UnauthorizedException) as exc_info:
            service.authenticate(student.email, "wrong-password", IP)
        assert exc_info.value.code == "INVALID_CREDENTIALS"
        assert exc_info.value.details["attempts_remaining"] == 4

    def test_unknown_email_counts_as_failure(self, service):
        with pytest.raises(UnauthorizedException) as exc_info:
            service.authenticate("ghost@example.com", PASSWORD, IP)
        assert exc_info.value.details["attempts_remaining"] == 4

    def test_sixth_attempt_is_rate_limited_even_with_right_password(self, service, student):
        for _ in range(5):
            with pytest.raises(UnauthorizedException):
                service.authenticate(student.email, "wrong-password", IP)

        with pytest.raises(RateLimitException) as exc_info:
            service.authenticate(student.email, PASSWORD, IP)
        error = exc_info.value
        assert error.message.startswith("LIMIT_EXCEEDED:")
        assert error.code == "LIMIT_EXCEEDED"
        assert error.details["attempts_remaining"] == 0
        assert error.message == f"LIMIT_EXCEEDED:{error.details['next_reset_time']}"

    def test_limit_is_per_origin(self, service, student):
        for _ in range(5):
            with pytest.raises(UnauthorizedException):
                service.authenticate(student.email, "wrong-password", IP)
        assert service.authenticate(student.email, PASSWORD, "198.51.100.20")["access_token"]

    def test_deactivated_account(self, service, db, student):
        student.is_active = False
        db.commit()
        with pytest.raises(ForbiddenException):
            service.authenticate(student.email, PASSWORD, IP)


class TestEmailVerification:
    def test_request_and_verify(self, service, db, otp_store, console_email):
        user = service.register_student(_registration())
        service.request_email_verification(user.email)

        message = console_email.outbox[-1]
        code = otp_store.get(otp_key(user.email, "registration")).code
        assert message["to"] == user.email
        assert code in message["text"]

        assert service.verify_email(user.email, code) is True
        db.refresh(user)
        assert user.email_verified is True

    def test_request_before_account_exists(self, service, otp_store):
        service.request_email_verification("later@example.com")
        code = otp_store.get(otp_key("later@example.com", "registration")).code
        assert service.verify_email("later@example.com", code) is True

    def test_code_is_single_use(self, service, otp_store):
        service.request_email_verification("later@example.com")
        code = otp_store.get(otp_key("later@example.com", "registration")).code
        service.verify_email("later@example.com", code)
        with pytest.raises(ValidationException) as exc_info:
            service.verify_email("later@example.com", code)
        assert exc_info.value.code == "INVALID_OTP"

    def test_no_code_issued(self, service):
        with pytest.raises(ValidationException):
            service.verify_email("nobody@example.com", "123456")

    def test_email_failure_keeps_the_code(self, db, otp_store):
        service = AuthService(db, OTPService(otp_store), email_service=EmailService(console=BrokenTransport()))
        service.request_email_verification("later@example.com")
        code = otp_store.get(otp_key("later@example.com", "registration")).code
        assert service.verify_email("later@example.com", code) is True
