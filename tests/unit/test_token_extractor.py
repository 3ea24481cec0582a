from __future__ import annotations

from sunvoy_client.infrastructure.adapters.sunvoy.token_extractor import HiddenInputTokenExtractor


def test_skips_hidden_input_without_value():
    html = """
    <form>
      <input type="hidden" id="access_token" value="abc">
      <input type="hidden" id="decorative">
    </form>
    """
    assert HiddenInputTokenExtractor().extract(html) == {"access_token": "abc"}


def test_collects_all_complete_hidden_inputs():
    html = """
    <div>
      <input type="hidden" id="openId" value="openid456">
      <input type="text" id="visible" value="nope">
      <input type="hidden" value="no-id">
      <input type="hidden" id="empty" value="">
      <input type="HIDDEN" id="userId" value="user-1">
      <input type="hidden" id="access_token" value="token 123">
    </div>
    """
    assert HiddenInputTokenExtractor().extract(html) == {
        "openId": "openid456",
        "userId": "user-1",
        "access_token": "token 123",
    }


def test_first_duplicate_wins():
    html = '<input type="hidden" id="a" value="1"><input type="hidden" id="a" value="2">'
    assert HiddenInputTokenExtractor().extract(html) == {"a": "1"}


def test_tolerates_broken_markup():
    html = '<html><body><div><input type=hidden id=apiuser value="demo@example.org"><p>unclosed'
    assert HiddenInputTokenExtractor().extract(html) == {"apiuser": "demo@example.org"}


def test_empty_document():
    assert HiddenInputTokenExtractor().extract("") == {}
