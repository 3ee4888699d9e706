#!/usr/bin/env python3
"""
Test suite for streammatch/ai.py: Gemini fallback parsing
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from streammatch.ai import GeminiParser, to_parsed_title
from streammatch.config import GEMINI_PLACEHOLDER_KEY
from streammatch.models import ParsedTitle


def gemini_answer(text):
    resp = MagicMock()
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return resp


@pytest.fixture
def parser():
    return GeminiParser(api_key="g-key", api_url="https://ai.example/generate")


class TestToParsedTitle:

    def test_movie(self):
        assert to_parsed_title({"type": "movie", "title": "Heat", "year": 1995}) == \
            ParsedTitle(title="Heat", year=1995)

    def test_series(self):
        parsed = to_parsed_title({"type": "tv", "title": "Dan Da Dan", "season": 2, "episode": "9"})
        assert parsed == ParsedTitle(title="Dan Da Dan", is_series=True, season=2, episode=9)

    @pytest.mark.parametrize("data", [
        {"type": "movie", "title": ""},
        {"type": "movie", "title": None},
        {"type": "tv", "title": "Show", "season": None, "episode": 1},
        {"type": "tv", "title": "Show", "season": 0, "episode": 1},
    ])
    def test_unusable(self, data):
        assert to_parsed_title(data) is None


class TestParseWithAI:

    def test_plain_json(self, parser):
        answer = gemini_answer('{"type": "movie", "title": "Inception", "year": 2010}')
        with patch("streammatch.ai.requests.post", return_value=answer) as post:
            parsed = parser.parse_with_ai("inceptn.cam.mkv")

        assert parsed == ParsedTitle(title="Inception", year=2010)
        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["x-goog-api-key"] == "g-key"
        assert "params" not in kwargs
        prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert 'Input: "inceptn.cam.mkv"' in prompt

    def test_code_fenced_json(self, parser):
        body = json.dumps({"type": "tv", "title": "Show", "season": 1, "episode": 4})
        with patch("streammatch.ai.requests.post", return_value=gemini_answer(f"```json\n{body}\n```")):
            assert parser.parse_with_ai("x.mkv").episode == 4

    def test_malformed_json(self, parser):
        with patch("streammatch.ai.requests.post", return_value=gemini_answer("not json")):
            assert parser.parse_with_ai("x.mkv") is None

    def test_missing_candidates(self, parser):
        resp = MagicMock()
        resp.json.return_value = {}
        with patch("streammatch.ai.requests.post", return_value=resp):
            assert parser.parse_with_ai("x.mkv") is None

    def test_http_error(self, parser):
        with patch("streammatch.ai.requests.post",
                   side_effect=requests.exceptions.Timeout("slow")):
            assert parser.parse_with_ai("x.mkv") is None

    @pytest.mark.parametrize("key", [None, "", GEMINI_PLACEHOLDER_KEY])
    def test_disabled_without_key(self, key):
        parser = GeminiParser(api_key=key)
        assert not parser.enabled
        with patch("streammatch.ai.requests.post") as post:
            assert parser.parse_with_ai("x.mkv") is None
        post.assert_not_called()


def failed_response(status):
    """requests.post replacement returning a real error Response for the requested URL."""
    def post(url, params=None, **kwargs):
        resp = requests.models.Response()
        resp.status_code = status
        resp.reason = "Server Error"
        resp.url = requests.Request("POST", url, params=params).prepare().url
        return resp
    return post


class TestKeyNeverLogged:

    def test_http_error(self, caplog):
        parser = GeminiParser(api_key="SECRETGEMINIKEY", api_url="https://ai.example/generate")
        with patch("streammatch.ai.requests.post", side_effect=failed_response(500)):
            with caplog.at_level("DEBUG", logger="streammatch.ai"):
                assert parser.parse_with_ai("x.mkv") is None
        assert "Gemini API request failed" in caplog.text
        assert "SECRETGEMINIKEY" not in caplog.text

    def test_connection_error(self, caplog):
        parser = GeminiParser(api_key="SECRETGEMINIKEY", api_url="https://ai.example/generate")

        def refuse(url, params=None, **kwargs):
            prepared = requests.Request("POST", url, params=params).prepare()
            raise requests.exceptions.ConnectionError(f"Max retries exceeded with url: {prepared.url}")

        with patch("streammatch.ai.requests.post", side_effect=refuse):
            with caplog.at_level("DEBUG", logger="streammatch.ai"):
                assert parser.parse_with_ai("x.mkv") is None
        assert "SECRETGEMINIKEY" not in caplog.text
