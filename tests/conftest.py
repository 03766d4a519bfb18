"""Shared fixtures: stand-in providers and a pacing recorder."""

import re
from collections import deque

import pytest

from transloom.codec import CONTENT_HEADER
from transloom.errors import ProviderError
from transloom.providers import CompletionProvider

ITEM_PATTERN = re.compile(r"^\d+\. (.*)$", re.MULTILINE)


def prompt_items(prompt):
    """Return the numbered items carried by a prompt."""
    _, _, body = prompt.rpartition(CONTENT_HEADER)
    return ITEM_PATTERN.findall(body)


class DictionaryProvider(CompletionProvider):
    """Answers numbered prompts item by item from a lookup table.

    Unknown items are upper-cased. ``fail_when`` receives the list of items
    and may veto the call by returning True.
    """

    def __init__(self, mapping=None, fail_when=None):
        self.mapping = mapping or {}
        self.fail_when = fail_when
        self.calls = []
        self.max_tokens = []

    def complete(self, prompt, *, max_tokens=None):
        items = prompt_items(prompt)
        self.calls.append(items)
        self.max_tokens.append(max_tokens)
        if self.fail_when is not None and self.fail_when(items):
            raise ProviderError("stub refused the request")
        return "\n\n".join(
            f"{index}. {self.mapping.get(item, item.upper())}"
            for index, item in enumerate(items, start=1)
        )


class FailingProvider(CompletionProvider):
    def __init__(self):
        self.calls = 0

    def complete(self, prompt, *, max_tokens=None):
        self.calls += 1
        raise ProviderError("provider unavailable")


class ScriptedProvider(CompletionProvider):
    """Replays canned responses; exceptions in the script are raised."""

    def __init__(self, *responses):
        self.responses = deque(responses)
        self.prompts = []

    def complete(self, prompt, *, max_tokens=None):
        self.prompts.append(prompt)
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleep:
    def __init__(self):
        self.pauses = []

    def __call__(self, seconds):
        self.pauses.append(seconds)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def dictionary_provider():
    return DictionaryProvider()


@pytest.fixture
def failing_provider():
    return FailingProvider()
