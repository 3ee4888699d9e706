#!/usr/bin/env python3
"""
Test suite for streammatch/catalog.py: paging, key rotation and rename
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from streammatch.catalog import PAGE_BATCH_DELAY, StreamCatalogClient
from streammatch.errors import CatalogError


def page(items, max_page=1):
    resp = MagicMock()
    resp.json.return_value = {"data": items, "metadata": {"maxPage": max_page}}
    return resp


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def client(sleep):
    return StreamCatalogClient(["k1", "k2"], base_url="https://catalog.example/manage/", sleep=sleep)


class TestSearch:

    def test_all_pages(self, client, sleep):
        pages = [page([{"id": i, "name": f"Video {i}"}], max_page=5) for i in range(1, 6)]
        with patch("streammatch.catalog.requests.get", side_effect=pages) as get:
            entries = client.search("video")

        assert [e.id for e in entries] == ["1", "2", "3", "4", "5"]
        assert get.call_count == 5
        first = get.call_args_list[0]
        assert first.args[0] == "https://catalog.example/manage"
        assert first.kwargs["params"] == {"page": 1, "perPage": 200, "search": "video"}
        sleep.assert_called_once_with(PAGE_BATCH_DELAY)

    def test_keys_rotate(self, client):
        pages = [page([], max_page=3), page([], 3), page([], 3)]
        with patch("streammatch.catalog.requests.get", side_effect=pages) as get:
            client.search()
        tokens = [c.kwargs["headers"]["api-token"] for c in get.call_args_list]
        assert tokens == ["k1", "k2", "k1"]

    def test_error_raises(self, client):
        with patch("streammatch.catalog.requests.get",
                   side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(CatalogError):
                client.search("x")

    def test_fetch_all_uses_empty_query(self, client):
        with patch("streammatch.catalog.requests.get", return_value=page([])) as get:
            client.fetch_all()
        assert get.call_args.kwargs["params"]["search"] == ""


class TestRename:

    def test_patch_request(self, client):
        with patch("streammatch.catalog.requests.patch") as patch_call:
            assert client.rename("abc", "Heat 1995 {949}.mkv") is True
        patch_call.assert_called_once()
        assert patch_call.call_args.args[0] == "https://catalog.example/manage/abc"
        assert patch_call.call_args.kwargs["json"] == {"name": "Heat 1995 {949}.mkv"}

    def test_failure_returns_false(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError("403")
        with patch("streammatch.catalog.requests.patch", return_value=resp):
            assert client.rename("abc", "x.mkv") is False


class TestInit:

    def test_requires_keys(self):
        with pytest.raises(CatalogError):
            StreamCatalogClient([])
