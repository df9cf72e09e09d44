from src.domain.entities.user import CREDENTIAL_FIELDS, AccountState
from tests.factories import create_fake_user


def test_state_follows_verification_flag():
    assert create_fake_user(is_email_verified=False).state == AccountState.UNVERIFIED
    assert create_fake_user(is_email_verified=True).state == AccountState.VERIFIED


def test_reset_pending_is_orthogonal_to_state():
    user = create_fake_user(is_email_verified=True)
    user.forgot_password_token = "digest"

    assert user.password_reset_pending
    assert user.state == AccountState.VERIFIED


def test_public_view_excludes_credentials():
    user = create_fake_user(refresh_token="digest")

    view = user.public_view()

    assert not CREDENTIAL_FIELDS & set(view)
    assert user.has_active_session
