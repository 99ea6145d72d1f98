import pytest

from app.auth import verify_password
from app.core.exceptions import NotFoundException, ValidationException
from app.services.email import EmailService
from app.services.email_console import ConsoleEmailService
from app.services.otp_service import OTPService
from app.services.otp_store import otp_key
from app.services.password_reset_service import PasswordResetService

NEW_PASSWORD = "Brand-new-pass1"


class BrokenTransport(ConsoleEmailService):
    def send_email(self, to_email, subject, html_content, text_content):
        raise ConnectionError("provider unavailable")


@pytest.fixture
def service(db, otp_store, email_service):
    return PasswordResetService(db, OTPService(otp_store), email_service=email_service)


def _code(otp_store, email):
    return otp_store.get(otp_key(email, "password-reset")).code


def test_full_reset_flow(service, db, student, otp_store, console_email):
    assert service.request_password_reset(student.email) is True
    assert "password" in console_email.outbox[-1]["subject"]
    code = _code(otp_store, student.email)

    assert service.verify_reset_code(student.email, code) is True
    service.reset_password(student.email, code, NEW_PASSWORD, NEW_PASSWORD)

    db.refresh(student)
    assert verify_password(NEW_PASSWORD, student.hashed_password)
    # consumed
    assert otp_store.get(otp_key(student.email, "password-reset")) is None


def test_unknown_email_still_reports_success(service, otp_store, console_email):
    assert service.request_password_reset("ghost@example.com") is True
    assert console_email.outbox == []
    assert len(otp_store) == 0


def test_email_failure_is_not_surfaced(db, student, otp_store):
    service = PasswordResetService(db, OTPService(otp_store), email_service=EmailService(console=BrokenTransport()))
    assert service.request_password_reset(student.email) is True


def test_verify_reset_code_unknown_user(service):
    with pytest.raises(NotFoundException):
        service.verify_reset_code("ghost@example.com", "123456")


def test_verify_reset_code_wrong_code(service, student, otp_store):
    service.request_password_reset(student.email)
    code = _code(otp_store, student.email)
    wrong = "000000" if code != "000000" else "111111"
    assert service.verify_reset_code(student.email, wrong) is False


def test_reset_without_prior_check(service, db, student, otp_store):
    service.request_password_reset(student.email)
    service.reset_password(student.email, _code(otp_store, student.email), NEW_PASSWORD, NEW_PASSWORD)
    db.refresh(student)
    assert verify_password(NEW_PASSWORD, student.hashed_password)


def test_password_mismatch(service, student, otp_store):
    service.request_password_reset(student.email)
    with pytest.raises(ValidationException) as exc_info:
        service.reset_password(student.email, _code(otp_store, student.email), NEW_PASSWORD, "something-else")
    assert exc_info.value.code == "PASSWORD_MISMATCH"
    # the code survives a mismatch
    assert otp_store.get(otp_key(student.email, "password-reset")) is not None


def test_reused_code_rejected(service, student, otp_store):
    service.request_password_reset(student.email)
    code = _code(otp_store, student.email)
    service.reset_password(student.email, code, NEW_PASSWORD, NEW_PASSWORD)
    with pytest.raises(ValidationException) as exc_info:
        service.reset_password(student.email, code, "Another-pass1", "Another-pass1")
    assert exc_info.value.code == "INVALID_OTP"


def test_reset_unknown_user(service):
    with pytest.raises(NotFoundException):
        service.reset_password("ghost@example.com", "123456", NEW_PASSWORD, NEW_PASSWORD)


def test_registration_code_cannot_reset_password(service, student, otp_store):
    registration_code = OTPService(otp_store).generate_otp(student.email, "registration")
    with pytest.raises(ValidationException):
        service.reset_password(student.email, registration_code, NEW_PASSWORD, NEW_PASSWORD)
