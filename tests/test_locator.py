"""Tests for the locator parser."""

from __future__ import annotations

import pytest

from hivepool.locator import MalformedLocator, accepts_locator, parse_locator
from hivepool.models import ConnectionOptions

BASE = "jdbc:dataproc://hive/"
REQUIRED = "projectId=pid;region=us-central1"


def test_parse_minimal_locator_uses_defaults() -> None:
    options = parse_locator(f"{BASE};{REQUIRED};clusterName=simple-cluster")

    assert options == ConnectionOptions(project_id="pid", region="us-central1", cluster_name="simple-cluster")
    assert options.database == ""
    assert options.port == 443
    assert options.http_path == "cliservice"
    assert options.transport_mode == "http"
    assert options.session_extras is None


def test_parse_full_locator_keeps_extras_in_order() -> None:
    options = parse_locator(
        f"{BASE}db-name;port=10003;{REQUIRED};clusterName=c1;user=foo;password=bar"
        "?hive.support.concurrency=true#a=123"
    )

    assert options.database == "db-name"
    assert options.port == 10003
    assert options.cluster_name == "c1"
    assert options.session_extras == "user=foo;password=bar"
    assert options.query_extras == "hive.support.concurrency=true"
    assert options.fragment_extras == "a=123"


def test_parse_keeps_equals_inside_values() -> None:
    options = parse_locator(f"{BASE};{REQUIRED};clusterPoolLabel=com=google:env=staging;token=a=b")

    assert options.cluster_pool_label == "com=google:env=staging"
    assert options.session_extras == "token=a=b"


def test_parse_allows_name_and_pool_label_together() -> None:
    options = parse_locator(f"{BASE};{REQUIRED};clusterName=c1;clusterPoolLabel=env=prod")

    assert options.cluster_name == "c1"
    assert options.cluster_pool_label == "env=prod"


def test_parse_without_cluster_info_leaves_both_empty() -> None:
    options = parse_locator(f"{BASE}db;{REQUIRED}")

    assert options.cluster_name is None
    assert options.cluster_pool_label is None


def test_parse_ignores_trailing_semicolon() -> None:
    options = parse_locator(f"{BASE};{REQUIRED};user=foo;")

    assert options.session_extras == "user=foo"


def test_repeated_key_keeps_first_position() -> None:
    options = parse_locator(f"{BASE};{REQUIRED};a=1;b=2;a=3")

    assert options.session_extras == "a=3;b=2"


@pytest.mark.parametrize(
    "url",
    [
        f"{BASE}clusterName=c1;{REQUIRED}",
        f"{BASE};{REQUIRED};httpPath=hive",
        f"{BASE};{REQUIRED};transportMode=binary",
        f"{BASE};region=us-central1;clusterName=c1",
        f"{BASE};projectId=pid;clusterName=c1",
        f"{BASE};projectId=;region=us-central1",
        f"{BASE};{REQUIRED};foo;bar",
        f"{BASE};{REQUIRED};;user=foo",
        f"{BASE};{REQUIRED};=value",
        f"{BASE};{REQUIRED};port=abc",
        f"{BASE};{REQUIRED};port=0",
        f"{BASE};{REQUIRED};port=-1",
        f"{BASE};{REQUIRED};port=70000",
        f"{BASE};",
        "jdbc:hive2://host:10000/;projectId=pid;region=r",
    ],
)
def test_parse_rejects_malformed_locators(url: str) -> None:
    with pytest.raises(MalformedLocator):
        parse_locator(url)


def test_accepts_locator_checks_prefix() -> None:
    assert accepts_locator(f"{BASE};{REQUIRED}")
    assert not accepts_locator("jdbc:hive2://host:10000/")
    assert not accepts_locator(None)


def test_extras_keep_control_characters_verbatim() -> None:
    options = parse_locator(f"{BASE}db;{REQUIRED};user=a\tb?x=1\r\n#y=\t2")

    assert options.session_extras == "user=a\tb"
    assert options.query_extras == "x=1\r\n"
    assert options.fragment_extras == "y=\t2"


def test_question_mark_in_fragment_stays_in_fragment() -> None:
    options = parse_locator(f"{BASE}db;{REQUIRED}#a=1?b=2")

    assert options.query_extras is None
    assert options.fragment_extras == "a=1?b=2"
