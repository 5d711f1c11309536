"""Tests for the command-line front end."""

import logging

import pytest

import main
from sitemap_generator.crawler import engine as engine_module


@pytest.fixture
def fake_network(monkeypatch, make_session):
    """Route every fetcher the engine creates to a FakeSession."""
    session = make_session({
        "https://a.test": '<a href="/about">about</a><a href="https://other.test/">x</a>',
        "https://a.test/about": "<p>about</p>",
    })

    class StubFetcher(engine_module.WebFetcher):
        async def start(self):
            self.session = session

    monkeypatch.setattr(engine_module, "WebFetcher", StubFetcher)
    yield session
    # setup_logging() replaces root handlers; leave a clean root logger behind
    logging.getLogger().handlers.clear()


def test_invalid_url_reports_error(tmp_path, capsys):
    output = tmp_path / "sitemap.xml"

    assert main.main(["not a url", "--output", str(output)]) == 1

    assert "Invalid URL format!" in capsys.readouterr().err
    assert not output.exists()
    logging.getLogger().handlers.clear()


def test_missing_config_file(tmp_path, capsys):
    assert main.main(["a.test", "--config", str(tmp_path / "missing.yaml")]) == 1
    assert "Configuration file not found" in capsys.readouterr().err


def test_invalid_override_rejected(capsys):
    assert main.main(["a.test", "--max-depth", "0"]) == 1
    assert "max_depth" in capsys.readouterr().err


def test_writes_sitemap_file(fake_network, tmp_path):
    output = tmp_path / "sitemap.xml"

    assert main.main(["a.test/", "--output", str(output), "--max-depth", "2"]) == 0

    content = output.read_text(encoding="utf-8")
    assert "<loc>https://a.test</loc>" in content
    assert "<loc>https://a.test/about</loc>" in content
    assert "other.test" not in content
    assert fake_network.fetched_urls == ["https://a.test", "https://a.test/about"]


def test_prints_to_stdout(fake_network, capsys):
    assert main.main(["https://a.test", "--stdout", "--change-freq", "monthly",
                      "--priority", "0.8", "--max-depth", "1"]) == 0

    out = capsys.readouterr().out
    assert out.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<changefreq>monthly</changefreq>" in out
    assert "<priority>0.8</priority>" in out


def test_metrics_file_written(fake_network, tmp_path):
    metrics = tmp_path / "metrics.prom"

    assert main.main(["a.test", "--output", str(tmp_path / "s.xml"),
                      "--metrics-file", str(metrics)]) == 0

    text = metrics.read_text(encoding="utf-8")
    assert "sitemap_pages_fetched_total 2.0" in text
    assert "sitemap_entries_added_total 2.0" in text


def test_respect_robots_aborts_when_disallowed(fake_network, monkeypatch, tmp_path):
    async def disallow(self, url, user_agent='*'):
        return False

    async def noop(self):
        return None

    monkeypatch.setattr(main.UrlValidator, "is_allowed_by_robots", disallow)
    monkeypatch.setattr(main.UrlValidator, "start", noop)
    output = tmp_path / "sitemap.xml"

    assert main.main(["a.test", "--respect-robots", "--output", str(output)]) == 1

    assert not output.exists()
    assert fake_network.fetched_urls == []
