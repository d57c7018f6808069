"""Tests for extracting JSON objects from model output."""

from __future__ import annotations

from ai_news.llm.json_parser import extract_json_object


def test_plain_json_object():
    result = extract_json_object('{"results": []}')

    assert result.ok
    assert result.data == {"results": []}


def test_json_wrapped_in_prose():
    text = 'Sure! Here is the data:\n{"results": [{"index": 1}]}\nLet me know if you need more.'

    result = extract_json_object(text)

    assert result.ok
    assert result.data == {"results": [{"index": 1}]}


def test_fenced_json_block_preferred():
    text = "Intro {not json}\n```json\n{\"results\": [{\"index\": 2}]}\n```\nOutro"

    result = extract_json_object(text)

    assert result.ok
    assert result.data["results"][0]["index"] == 2


def test_no_json_found():
    result = extract_json_object("I could not produce any summaries today.")

    assert not result.ok
    assert result.data is None
    assert result.error == "No JSON object found"
    assert result.raw == "I could not produce any summaries today."


def test_empty_response():
    result = extract_json_object("   ")

    assert not result.ok
    assert result.error == "Empty response"


def test_invalid_json_snippet():
    result = extract_json_object('prefix {"results": [1, 2,} suffix')

    assert not result.ok
    assert result.error.startswith("Invalid JSON")


def test_non_object_json_is_rejected():
    result = extract_json_object("[1, 2, 3]")

    assert not result.ok
    assert result.error == "JSON value is not an object"
