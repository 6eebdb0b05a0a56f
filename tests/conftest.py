from __future__ import annotations

import itertools

import pytest

from microblog_backend import create_app, db, get_services

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "BCRYPT_LOG_ROUNDS": 4,
    "ADMIN_EMAIL": "admin@example.com",
    "ADMIN_PASSWORD": "adminsecret",
    "ADMIN_NAME": "Admin User",
}


@pytest.fixture()
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        try:
            yield app
        finally:
            db.session.remove()
            db.drop_all()


@pytest.fixture()
def app_factory():
    """Build apps with config overrides, each with its own tables"""
    contexts = []

    def _app_factory(**overrides):
        app = create_app({**TEST_CONFIG, **overrides})
        ctx = app.app_context()
        ctx.push()
        db.create_all()
        contexts.append(ctx)
        return app

    yield _app_factory

    for ctx in reversed(contexts):
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def services(app):
    return get_services(app)


@pytest.fixture()
def make_user(services):
    counter = itertools.count(1)

    def _make_user(name=None, email=None, password="foobar", admin=False):
        n = next(counter)
        user = services.identity.create({
            "name": name or f"Person {n}",
            "email": email or f"person-{n}@example.com",
            "password": password,
            "password_confirmation": password,
        })
        if admin:
            user.admin = True
            db.session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_post(services):
    def _make_post(user, content="Lorem ipsum", created_at=None):
        post = services.posts.create(user.id, {"content": content})
        if created_at is not None:
            post.created_at = created_at
            db.session.commit()
        return post

    return _make_post
