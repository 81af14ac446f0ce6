import pytest

from otp_service.services.tokens import TokenError, create_admin_token, decode_admin_token


def test_round_trip_subject():
    token = create_admin_token("ops")
    assert decode_admin_token(token).subject == "ops"


@pytest.mark.parametrize("token", ["", "not-a-jwt"])
def test_rejects_garbage(token):
    with pytest.raises(TokenError):
        decode_admin_token(token)


def test_rejects_expired():
    token = create_admin_token("ops", expires_minutes=-5)
    with pytest.raises(TokenError, match="expired"):
        decode_admin_token(token)
