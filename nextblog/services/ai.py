"""
AI-assisted writing.

Provider endpoints are stored as AIModel rows with Fernet-encrypted API
keys. Requests go out through ``requests``; every generation attempt is
written to AIUsageLog whether it succeeds or not.
"""
import base64
import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from typing import List

import requests
from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings
from django.db import transaction

from ..conf import blog_settings
from ..models import AIModel, AIUsageLog
from ..utils import paginate

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

LENGTH_GUIDES = {
    "short": "around 500 words",
    "medium": "around 1000 words",
    "long": "at least 2000 words",
}

UNTITLED = "Untitled"


class AIProviderError(Exception):
    """The provider could not be reached or returned an error."""


class AIConfigurationError(Exception):
    """No usable model is configured."""


@dataclass
class GeneratedArticle:
    title: str
    content: str
    tags: List[str] = field(default_factory=list)


def _fernet():
    secret = blog_settings.AI_ENCRYPTION_KEY or settings.SECRET_KEY
    key = base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest())
    return Fernet(key)


def encrypt_api_key(api_key):
    return _fernet().encrypt(api_key.encode()).decode()


def decrypt_api_key(token):
    return _fernet().decrypt(token.encode()).decode()


class OpenAICompatProvider:
    """OpenAI chat completions format, also used by Qwen."""

    def headers(self, api_key):
        return {"Authorization": f"Bearer {api_key}"}

    def body(self, model, prompt, max_tokens):
        payload = {
            "model": model.model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }
        payload.update(model.config or {})
        return payload

    def extract(self, data):
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""


class ClaudeProvider:
    """Anthropic messages format."""

    api_version = "2023-06-01"

    def headers(self, api_key):
        return {"x-api-key": api_key, "anthropic-version": self.api_version}

    def body(self, model, prompt, max_tokens):
        payload = {
            "model": model.model_id,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        payload.update(model.config or {})
        return payload

    def extract(self, data):
        try:
            return data["content"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            return ""


PROVIDERS = {
    "openai": OpenAICompatProvider(),
    "qwen": OpenAICompatProvider(),
    "claude": ClaudeProvider(),
}


def build_prompt(idea, style=None, length="medium"):
    lines = [
        "You are a professional blog writer. Write a blog article based on the idea below.",
        "",
        f"Idea: {idea}",
    ]
    if style:
        lines.append(f"Style: {style}")
    lines.append(f"Length: {LENGTH_GUIDES.get(length, LENGTH_GUIDES['medium'])}")
    lines.extend([
        "",
        "Reply with JSON only, in this shape:",
        '{"title": "Article title", "content": "Article body in Markdown", "tags": ["tag1", "tag2"]}',
    ])
    return "\n".join(lines)


def parse_generated(text):
    """
    Pull the article out of a provider reply.

    Falls back to the raw text as content when no JSON object is found.
    """
    match = JSON_OBJECT_RE.search(text or "")
    if match:
        try:
            data = json.loads(match.group(0))
        except ValueError:
            data = None
        if isinstance(data, dict):
            tags = data.get("tags")
            return GeneratedArticle(
                title=data.get("title") or UNTITLED,
                content=data.get("content") or "",
                tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
            )
    return GeneratedArticle(title=UNTITLED, content=text or "")


class AIService:
    """Model configuration and article generation."""

    def __init__(self, model=AIModel, log_model=AIUsageLog, session=None):
        self.model = model
        self.log_model = log_model
        self.session = session or requests.Session()

    def create_model(self, name, provider, api_url, api_key, model_id, config=None):
        return self.model.objects.create(
            name=name,
            provider=provider,
            api_url=api_url,
            api_key=encrypt_api_key(api_key),
            model_id=model_id,
            config=config or {},
        )

    def find_by_id(self, pk):
        return self.model.objects.filter(pk=pk).first()

    def find_all(self):
        return list(self.model.objects.all())

    def update_model(self, pk, **fields):
        ai_model = self.model.objects.get(pk=pk)
        if fields.get("api_key"):
            fields["api_key"] = encrypt_api_key(fields["api_key"])
        else:
            fields.pop("api_key", None)
        for name, value in fields.items():
            setattr(ai_model, name, value)
        ai_model.save()
        return ai_model

    def delete_model(self, pk):
        self.model.objects.get(pk=pk).delete()

    def set_default(self, pk):
        """Make ``pk`` the only default model."""
        with transaction.atomic():
            ai_model = self.model.objects.select_for_update().get(pk=pk)
            self.model.objects.exclude(pk=pk).update(is_default=False)
            ai_model.is_default = True
            ai_model.save(update_fields=["is_default", "updated_at"])
        return ai_model

    def get_default(self):
        return self.model.objects.filter(is_default=True, is_enabled=True).first()

    def test_connection(self, pk):
        """Send a tiny prompt. Returns ``{"success": bool, "error": str|None}``."""
        ai_model = self.find_by_id(pk)
        if ai_model is None:
            return {"success": False, "error": "Model not found"}
        try:
            reply = self.call(ai_model, 'Say "OK" if you can hear me.')
        except (AIProviderError, InvalidToken) as e:
            return {"success": False, "error": str(e) or "Could not decrypt API key"}
        return {"success": bool(reply), "error": None}

    def call(self, ai_model, prompt):
        """Send ``prompt`` to the model's provider and return the reply text."""
        provider = PROVIDERS.get(ai_model.provider)
        if provider is None:
            raise AIProviderError(f"Unsupported provider: {ai_model.provider}")

        api_key = decrypt_api_key(ai_model.api_key)
        try:
            response = self.session.post(
                ai_model.api_url,
                headers=provider.headers(api_key),
                json=provider.body(ai_model, prompt, blog_settings.AI_MAX_TOKENS),
                timeout=blog_settings.AI_REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            raise AIProviderError(f"API error: {e.response.status_code} {e.response.reason}") from e
        except (requests.RequestException, ValueError) as e:
            raise AIProviderError(f"API request failed: {e}") from e
        return provider.extract(data)

    def generate_article(self, idea, style=None, length="medium"):
        """Draft an article from an idea with the default model."""
        ai_model = self.get_default()
        if ai_model is None:
            raise AIConfigurationError("No default AI model configured")

        prompt = build_prompt(idea, style, length)
        try:
            reply = self.call(ai_model, prompt)
        except AIProviderError as e:
            self._log_usage(ai_model, prompt, "", success=False, error=str(e))
            logger.error("AI generation with %s failed: %s", ai_model.name, e)
            raise

        self._log_usage(ai_model, prompt, reply, success=True)
        logger.info("AI generation with %s succeeded", ai_model.name)
        return parse_generated(reply)

    def usage_logs(self, page=1, limit=20):
        return paginate(self.log_model.objects.all(), page, limit)

    def _log_usage(self, ai_model, prompt, response, success, error=""):
        return self.log_model.objects.create(
            ai_model=ai_model,
            prompt=prompt,
            response=response,
            success=success,
            error=error or "",
        )
