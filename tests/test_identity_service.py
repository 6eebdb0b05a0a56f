from __future__ import annotations

import pytest

from sqlalchemy import text

from microblog_backend import db
from models.micropost import Micropost
from models.relationship import Relationship
from models.user import User
from utils.errors import InvalidOperation, ValidationError


def _signup(services, **overrides):
    data = {
        "name": "Example User",
        "email": "user@example.com",
        "password": "foobar",
        "password_confirmation": "foobar",
    }
    data.update(overrides)
    return services.identity.create(data)


def test_create_user_with_valid_data(services) -> None:
    user = _signup(services)
    assert user.id is not None
    assert user.name == "Example User"
    assert user.admin is False
    assert user.password_hash != "foobar"


def test_email_is_stored_lowercase(services) -> None:
    user = _signup(services, email="Foo@ExAMPle.CoM")
    db.session.expire_all()
    assert db.session.get(User, user.id).email == "foo@example.com"


def test_duplicate_email_is_rejected_case_insensitively(services) -> None:
    _signup(services, email="Foo@ExAMPle.CoM")
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, email="FOO@EXAMPLE.COM")
    assert excinfo.value.errors["email"] == ["has already been taken"]
    assert User.query.count() == 1


@pytest.mark.parametrize("name", ["", " "])
def test_blank_name_is_rejected(services, name) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, name=name)
    assert "name" in excinfo.value


def test_name_longer_than_50_characters_is_rejected(services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, name="a" * 51)
    assert excinfo.value.errors["name"] == ["is too long (maximum is 50 characters)"]
    assert _signup(services, name="a" * 50).name == "a" * 50


@pytest.mark.parametrize(
    "email",
    ["user@foo,com", "user_at_foo.org", "example.user@foo.", "foo@bar_baz.com", "foo@bar+baz.com", " "],
)
def test_malformed_email_is_rejected(services, email) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, email=email)
    assert "email" in excinfo.value


@pytest.mark.parametrize("email", ["user@foo.COM", "A_US-ER@f.b.org", "frst.lst@foo.jp", "a+b@baz.cn"])
def test_wellformed_email_is_accepted(services, email) -> None:
    assert _signup(services, email=email).email == email.lower()


def test_short_password_is_rejected(services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, password="a" * 5, password_confirmation="a" * 5)
    assert excinfo.value.errors["password"] == ["is too short (minimum is 6 characters)"]


def test_password_confirmation_mismatch_is_rejected(services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, password_confirmation="mismatch")
    assert "password_confirmation" in excinfo.value
    assert "Password confirmation doesn't match Password" in excinfo.value.full_messages()


def test_admin_flag_cannot_be_mass_assigned(services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _signup(services, admin=True)
    assert excinfo.value.errors["admin"] == ["can't be mass-assigned"]
    assert User.query.count() == 0


def test_authenticate_returns_user_for_valid_password(services) -> None:
    user = _signup(services)
    assert services.identity.authenticate("USER@example.com", "foobar") == user


def test_authenticate_returns_none_on_mismatch_or_unknown_email(services) -> None:
    _signup(services)
    assert services.identity.authenticate("user@example.com", "invalid") is None
    assert services.identity.authenticate("nobody@example.com", "foobar") is None
    assert services.identity.authenticate("", "") is None


def test_update_changes_profile_fields(services, make_user) -> None:
    user = make_user()
    services.identity.update(user.id, {"name": "New Name", "email": "New@Example.com"})
    assert user.name == "New Name"
    assert user.email == "new@example.com"


def test_update_keeps_own_email_and_rejects_taken_one(services, make_user) -> None:
    user = make_user(email="mine@example.com")
    make_user(email="taken@example.com")

    services.identity.update(user.id, {"email": "MINE@example.com"})
    with pytest.raises(ValidationError) as excinfo:
        services.identity.update(user.id, {"email": "taken@example.com"})
    assert excinfo.value.errors["email"] == ["has already been taken"]


def test_update_password_allows_new_login(services, make_user) -> None:
    user = make_user(email="pw@example.com")
    services.identity.update(user.id, {"password": "newsecret", "password_confirmation": "newsecret"})
    assert services.identity.authenticate("pw@example.com", "foobar") is None
    assert services.identity.authenticate("pw@example.com", "newsecret") == user


def test_update_rejects_admin_field(services, make_user) -> None:
    user = make_user()
    with pytest.raises(ValidationError):
        services.identity.update(user.id, {"admin": True})
    db.session.expire_all()
    assert db.session.get(User, user.id).admin is False


def test_destroy_cascades_to_posts_and_relationships(services, make_user, make_post) -> None:
    user = make_user()
    other = make_user()
    make_post(user)
    make_post(user)
    make_post(other)
    services.following.follow(user.id, other.id)
    services.following.follow(other.id, user.id)

    user_id = user.id
    services.identity.destroy(user_id)

    assert services.identity.get(user_id) is None
    assert services.posts.list_for_user(user_id).all() == []
    assert Micropost.query.count() == 1
    assert Relationship.query.count() == 0
    assert services.following.followers(other.id) == set()
    assert services.following.followed_users(other.id) == set()


def test_destroy_unknown_user_is_invalid(services) -> None:
    with pytest.raises(InvalidOperation):
        services.identity.destroy(12345)


def test_admin_can_destroy_other_users_but_not_itself(services, make_user) -> None:
    admin = make_user(admin=True)
    user = make_user()
    user_id = user.id

    with pytest.raises(InvalidOperation):
        services.identity.destroy_as(admin.id, admin.id)

    services.identity.destroy_as(admin.id, user_id)
    assert services.identity.get(user_id) is None


def test_non_admin_cannot_destroy_users(services, make_user) -> None:
    user = make_user()
    other = make_user()
    with pytest.raises(InvalidOperation):
        services.identity.destroy_as(user.id, other.id)
    assert services.identity.get(other.id) is not None


def test_list_users_paginates_by_id(services, make_user) -> None:
    users = [make_user() for _ in range(5)]
    page = services.identity.list_users(page=2, per_page=2)
    assert page.items == users[2:4]
    assert page.total == 5


def test_missing_password_confirmation_is_rejected_at_signup(services) -> None:
    with pytest.raises(ValidationError) as excinfo:
        services.identity.create({
            "name": "Example User",
            "email": "user@example.com",
            "password": "foobar",
        })
    assert excinfo.value.errors["password_confirmation"] == ["can't be blank"]
    assert User.query.count() == 0


def test_update_password_requires_confirmation(services, make_user) -> None:
    user = make_user(email="pw@example.com")
    with pytest.raises(ValidationError) as excinfo:
        services.identity.update(user.id, {"password": "newsecret"})
    assert excinfo.value.errors["password_confirmation"] == ["can't be blank"]
    assert services.identity.authenticate("pw@example.com", "foobar") == user


def test_password_longer_than_72_bytes_is_accepted(services) -> None:
    secret = "a" * 80
    user = _signup(services, password=secret, password_confirmation=secret)
    assert services.identity.authenticate("user@example.com", secret) == user
    assert services.identity.authenticate("user@example.com", "a" * 72) is None


def test_deleting_user_row_cascades_in_the_database(services, make_user, make_post) -> None:
    user = make_user()
    other = make_user()
    make_post(user)
    make_post(other)
    services.following.follow(user.id, other.id)
    services.following.follow(other.id, user.id)
    user_id = user.id

    db.session.execute(text("DELETE FROM users WHERE id = :id"), {"id": user_id})
    db.session.commit()
    db.session.expire_all()

    assert Micropost.query.filter_by(user_id=user_id).count() == 0
    assert Micropost.query.count() == 1
    assert Relationship.query.count() == 0
