"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from article_harvest.config import AppConfig, load_config, load_sites_file


def test_load_config_defaults_without_path():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.fetch.timeout_seconds == 60.0
    assert cfg.fetch.retries == 0
    assert cfg.feed.date_policy == "skip"
    assert cfg.extract.min_selector_text == 200
    assert cfg.extract.min_candidate_text == 100
    assert cfg.sites is None


def test_load_config_merges_sections(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "fetch:\n"
        "  concurrency: 2\n"
        "  unknown_key: ignored\n"
        "feed:\n"
        "  date_policy: fail\n"
        "logging:\n"
        "  level: DEBUG\n"
        "sites:\n"
        "  - name: Blog\n"
        "    feed_url: https://blog.example.com/rss\n"
        "    dialect: rss2\n"
        "unrelated: true\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.fetch.concurrency == 2
    assert cfg.fetch.timeout_seconds == 60.0
    assert cfg.feed.date_policy == "fail"
    assert cfg.logging.level == "DEBUG"
    assert cfg.sites == [{"name": "Blog", "feed_url": "https://blog.example.com/rss", "dialect": "rss2"}]


def test_load_config_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_load_sites_file_accepts_list_or_mapping(tmp_path: Path):
    as_list = tmp_path / "list.yaml"
    as_list.write_text("- name: A\n  feed_url: https://a.example.com/rss\n  dialect: atom\n", encoding="utf-8")
    as_mapping = tmp_path / "mapping.yaml"
    as_mapping.write_text("sites:\n  - name: B\n    feed_url: https://b.example.com/rss\n    dialect: rss1\n", encoding="utf-8")

    assert load_sites_file(str(as_list))[0]["name"] == "A"
    assert load_sites_file(str(as_mapping))[0]["name"] == "B"


def test_load_sites_file_rejects_scalar(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("just a string\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_sites_file(str(path))
