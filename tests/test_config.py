"""Tests for configuration loading."""

import pytest

from sitemap_generator.utils.config import ConfigManager, DEFAULT_EXCLUDED_EXTENSIONS, load_config


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults_without_file():
    config = load_config()

    assert config.crawler.request_timeout == 10
    assert config.crawler.max_redirects == 3
    assert config.crawler.max_pages is None
    assert config.crawler.traversal_order == 'breadth_first'
    assert config.crawler.excluded_extensions == DEFAULT_EXCLUDED_EXTENSIONS
    assert config.sitemap.max_depth == 3
    assert config.sitemap.change_freq == 'weekly'
    assert config.sitemap.priority == 0.5
    assert config.logging.file is None


def test_load_partial_file(tmp_path):
    path = write_config(tmp_path, """
crawler:
  max_pages: 50
  excluded_extensions: [.PNG, .Mp4]
sitemap:
  max_depth: 2
  change_freq: daily
""")
    config = load_config(path)

    assert config.crawler.max_pages == 50
    assert config.crawler.excluded_extensions == ['.png', '.mp4']
    assert config.crawler.user_agent.endswith('SitemapGenerator/1.0)')
    assert config.sitemap.max_depth == 2
    assert config.sitemap.change_freq == 'daily'
    assert config.sitemap.priority == 0.5


def test_empty_file_uses_defaults(tmp_path):
    config = load_config(write_config(tmp_path, ""))
    assert config.sitemap.output_file == 'sitemap.xml'


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("text", [
    "sitemap:\n  max_depth: 0\n",
    "sitemap:\n  priority: 2.0\n",
    "sitemap:\n  change_freq: sometimes\n",
    "crawler:\n  traversal_order: random\n",
    "crawler:\n  request_timeout: 0\n",
    "crawler:\n  max_redirects: -1\n",
    "crawler:\n  unknown_key: 1\n",
    "- just\n- a list\n",
])
def test_invalid_values(tmp_path, text):
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path, text))


def test_revalidate_after_changes():
    manager = ConfigManager()
    config = manager.load_config()
    config.sitemap.max_depth = 0

    with pytest.raises(ValueError):
        manager.validate()


def test_config_property_requires_load():
    with pytest.raises(ValueError):
        ConfigManager().config
