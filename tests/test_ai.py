"""
Tests for the AI writing assistant.
"""
import json
from unittest import mock

import pytest
import requests

from nextblog.models import AIModel, AIUsageLog
from nextblog.services import AIConfigurationError, AIProviderError, AIService
from nextblog.services.ai import build_prompt, decrypt_api_key, parse_generated


def json_response(payload, status=200):
    response = mock.Mock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        error = requests.HTTPError(response=response)
        response.reason = "Unauthorized"
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


def openai_reply(text):
    return {"choices": [{"message": {"content": text}}]}


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def ai(db, session):
    return AIService(session=session)


@pytest.fixture
def openai_model(ai):
    model = ai.create_model(
        name="GPT",
        provider=AIModel.Provider.OPENAI,
        api_url="https://api.example.com/v1/chat/completions",
        api_key="sk-secret",
        model_id="gpt-4o",
    )
    return ai.set_default(model.pk)


class TestModelConfig:
    def test_api_key_is_encrypted(self, openai_model):
        stored = AIModel.objects.get(pk=openai_model.pk).api_key

        assert stored != "sk-secret"
        assert decrypt_api_key(stored) == "sk-secret"

    def test_update_keeps_key_when_blank(self, ai, openai_model):
        ai.update_model(openai_model.pk, name="GPT-4", api_key="")

        updated = ai.find_by_id(openai_model.pk)
        assert updated.name == "GPT-4"
        assert decrypt_api_key(updated.api_key) == "sk-secret"

    def test_single_default(self, ai, openai_model):
        other = ai.create_model("Claude", AIModel.Provider.CLAUDE, "https://api.example.com/v1/messages", "key", "claude")

        ai.set_default(other.pk)
        ai.set_default(openai_model.pk)
        ai.set_default(other.pk)

        assert list(AIModel.objects.filter(is_default=True)) == [other]
        assert ai.get_default() == other


class TestCall:
    def test_openai_request(self, ai, session, openai_model):
        session.post.return_value = json_response(openai_reply("Hello"))

        assert ai.call(openai_model, "Hi") == "Hello"

        _, kwargs = session.post.call_args
        assert kwargs["headers"] == {"Authorization": "Bearer sk-secret"}
        assert kwargs["json"]["model"] == "gpt-4o"
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "Hi"}]
        assert kwargs["timeout"] == 60

    def test_claude_request(self, ai, session):
        model = ai.create_model("Claude", AIModel.Provider.CLAUDE, "https://api.example.com/v1/messages", "key", "claude")
        session.post.return_value = json_response({"content": [{"type": "text", "text": "Hello"}]})

        assert ai.call(model, "Hi") == "Hello"

        _, kwargs = session.post.call_args
        assert kwargs["headers"]["x-api-key"] == "key"
        assert kwargs["headers"]["anthropic-version"] == "2023-06-01"

    def test_http_error(self, ai, session, openai_model):
        session.post.return_value = json_response({}, status=401)

        with pytest.raises(AIProviderError, match="API error: 401"):
            ai.call(openai_model, "Hi")

    def test_connection_error(self, ai, session, openai_model):
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(AIProviderError):
            ai.call(openai_model, "Hi")

    def test_test_connection(self, ai, session, openai_model):
        session.post.return_value = json_response(openai_reply("OK"))
        assert ai.test_connection(openai_model.pk) == {"success": True, "error": None}

        session.post.side_effect = requests.Timeout("timed out")
        result = ai.test_connection(openai_model.pk)
        assert not result["success"]
        assert "timed out" in result["error"]

        assert ai.test_connection(openai_model.pk + 100) == {"success": False, "error": "Model not found"}


class TestGenerateArticle:
    def test_generates_and_logs(self, ai, session, openai_model):
        reply = "Sure!\n" + json.dumps({"title": "Async Python", "content": "# Intro", "tags": ["python"]})
        session.post.return_value = json_response(openai_reply(reply))

        article = ai.generate_article("asyncio tips", style="casual", length="short")

        assert article.title == "Async Python"
        assert article.content == "# Intro"
        assert article.tags == ["python"]
        log = AIUsageLog.objects.get()
        assert log.success
        assert log.ai_model == openai_model
        assert "asyncio tips" in log.prompt

    def test_failure_is_logged_and_raised(self, ai, session, openai_model):
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(AIProviderError):
            ai.generate_article("asyncio tips")

        log = AIUsageLog.objects.get()
        assert not log.success
        assert "refused" in log.error

    def test_requires_default_model(self, ai):
        with pytest.raises(AIConfigurationError):
            ai.generate_article("anything")

    def test_usage_logs(self, ai, session, openai_model):
        session.post.return_value = json_response(openai_reply("plain text"))
        ai.generate_article("one")
        ai.generate_article("two")

        assert ai.usage_logs()["total"] == 2


class TestHelpers:
    def test_prompt(self):
        prompt = build_prompt("asyncio tips", style="casual", length="long")

        assert "asyncio tips" in prompt
        assert "Style: casual" in prompt
        assert "at least 2000 words" in prompt

    def test_parse_plain_text(self):
        article = parse_generated("Just some text")

        assert article.title == "Untitled"
        assert article.content == "Just some text"
        assert article.tags == []

    def test_parse_bad_json(self):
        article = parse_generated("{not json}")
        assert article.content == "{not json}"
