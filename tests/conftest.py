"""Shared fixtures for Listly tests."""

from __future__ import annotations

import pytest

from app import create_app
from config import TestingConfig
from database import db
from models import User
from scraper import EXTENSION_KEY, ScrapeResult

SAMPLE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <title>Acme Store</title>
    <meta name="description" content="Widgets and more">
    <meta name="keywords" content="widgets, gadgets">
    <script>var x = 1;</script>
    <style>body { color: red; }</style>
</head>
<body>
    <nav><a href="/home">Home</a><a href="#top">Top</a></nav>
    <div class="content">
        <h1>Hello World</h1>
        <p>This is a test page with <a href="https://example.com/docs">a link</a>.</p>
        <h2>Contact</h2>
        <p>Write to sales@acme.test for a quote.</p>
        <a href="javascript:void(0)">Click</a>
        <a href="/home">Home again</a>
        <img src="/img/logo.png" alt="Logo">
        <img src="data:image/png;base64,AAAA" alt="inline">
    </div>
    <footer>Copyright 2024</footer>
</body>
</html>
"""

SAMPLE_MARKDOWN = (
    "# Acme Store\n\n"
    "Welcome to the Acme store.\n\n"
    "Contact sales@acme.test or call +1 555-123-4567.\n\n"
    "Widgets from $19.99 each."
)


def make_result(**overrides):
    fields = {
        'markdown': SAMPLE_MARKDOWN,
        'metadata': {'title': 'Acme Store', 'description': 'Widgets and more'},
        'links': [
            {'url': 'https://acme.test/about', 'text': 'About'},
            {'url': 'https://acme.test/blank', 'text': ''},
        ],
        'extract': {
            'headings': ['# Acme Store'],
            'images': [{'src': 'https://acme.test/logo.png', 'alt': 'Logo'}],
        },
    }
    fields.update(overrides)
    return ScrapeResult(**fields)


class FakeScraper:
    """Stands in for the scrape service; records the URLs it was asked for."""

    def __init__(self, result=None, error=None):
        self.result = result or make_result()
        self.error = error
        self.calls = []

    def scrape(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def app(tmp_path):
    class Config(TestingConfig):
        EXPORT_DIR = str(tmp_path / "exports")

    app = create_app(Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def fake_scraper(app):
    scraper = FakeScraper()
    app.extensions[EXTENSION_KEY] = scraper
    return scraper


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture()
def user(ctx):
    user = User(id="user_test", email="ada@example.com", password_hash="x")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def other_user(ctx):
    user = User(id="user_other", email="bob@example.com", password_hash="x")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_client(client, fake_scraper):
    """A test client with a registered, signed-in account."""
    response = client.post(
        "/register",
        data={"email": "ada@example.com", "password": "correct-horse", "display_name": "Ada"},
    )
    assert response.status_code == 302
    return client
