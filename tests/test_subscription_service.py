from datetime import timedelta

import pytest

from app.models.subscription.subscription_model import Subscription
from app.services.email.email_service import TOKEN_ALPHABET
from app.services.subscription_service import SubscriptionError, SubscriptionService
from tests.utils import FakeMailer, create_subscription, create_wishlist


@pytest.fixture()
def wishlist(db_session):
    return create_wishlist(db_session, name="Wedding")


def test_subscribe_creates_pending_subscription_and_sends_email(db_session, wishlist):
    mailer = FakeMailer()

    subscription = SubscriptionService(db_session, mailer).subscribe(wishlist.id, "guest@example.com")

    assert subscription.verified_at is None
    assert subscription.verification_token
    assert set(subscription.verification_token) <= set(TOKEN_ALPHABET)
    assert subscription.unsubscribe_token != subscription.verification_token
    assert len(mailer.sent) == 1
    message = mailer.sent[0]
    assert message["to"] == "guest@example.com"
    assert message["subject"] == "Verify your subscription to Wedding"
    assert f"verify-subscription?token={subscription.verification_token}" in message["html"]


def test_subscribe_again_resends_same_token(db_session, wishlist):
    mailer = FakeMailer()
    service = SubscriptionService(db_session, mailer)

    first = service.subscribe(wishlist.id, "guest@example.com")
    second = service.subscribe(wishlist.id, "guest@example.com")

    assert first.id == second.id
    assert db_session.query(Subscription).count() == 1
    assert len(mailer.sent) == 2
    assert first.verification_token in mailer.sent[1]["html"]


def test_subscribe_when_already_verified_sends_nothing(db_session, wishlist):
    existing = create_subscription(db_session, wishlist, email="guest@example.com")
    mailer = FakeMailer()

    result = SubscriptionService(db_session, mailer).subscribe(wishlist.id, "guest@example.com")

    assert result.id == existing.id
    assert mailer.sent == []


@pytest.mark.parametrize(
    "list_id, email, code, status",
    [
        (None, "guest@example.com", "missing_list_id_or_email", 400),
        ("some-list", "", "missing_list_id_or_email", 400),
        ("some-list", "not-an-email", "invalid_email", 400),
        ("unknown-list", "guest@example.com", "list_not_found", 404),
    ],
)
def test_subscribe_validation(db_session, list_id, email, code, status):
    with pytest.raises(SubscriptionError) as exc:
        SubscriptionService(db_session, FakeMailer()).subscribe(list_id, email)
    assert exc.value.code == code
    assert exc.value.status_code == status


def test_verify_marks_subscription_and_clears_token(db_session, wishlist):
    pending = create_subscription(db_session, wishlist, verified=False)
    token = pending.verification_token

    verified = SubscriptionService(db_session).verify(token)

    assert verified.verified_at is not None
    assert verified.verification_token is None

    with pytest.raises(SubscriptionError) as exc:
        SubscriptionService(db_session).verify(token)
    assert exc.value.status_code == 404


def test_verify_expired_link(db_session, wishlist):
    pending = create_subscription(db_session, wishlist, verified=False, expires_in=timedelta(hours=-1))

    with pytest.raises(SubscriptionError) as exc:
        SubscriptionService(db_session).verify(pending.verification_token)

    assert exc.value.code == "verification_link_expired"
    assert exc.value.status_code == 410
    db_session.refresh(pending)
    assert pending.verified_at is None


def test_verify_requires_token(db_session):
    with pytest.raises(SubscriptionError) as exc:
        SubscriptionService(db_session).verify("")
    assert exc.value.code == "missing_verification_token"


def test_unsubscribe_deletes_and_is_idempotent(db_session, wishlist):
    subscription = create_subscription(db_session, wishlist)
    token = subscription.unsubscribe_token
    service = SubscriptionService(db_session)

    assert service.unsubscribe(token) is True
    assert db_session.query(Subscription).count() == 0
    assert service.unsubscribe(token) is False

    with pytest.raises(SubscriptionError) as exc:
        service.unsubscribe(None)
    assert exc.value.code == "missing_unsubscribe_token"
