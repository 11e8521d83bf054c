from __future__ import annotations


DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


def get_generate_content_url(model: str, base_url: str = DEFAULT_GEMINI_BASE_URL) -> str:
	return f"{base_url.rstrip('/')}/v1beta/models/{model}:generateContent"
