from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..config.urls import DEFAULT_GEMINI_BASE_URL, get_generate_content_url
from ..core.domain.errors import AdvisorUnavailableError
from ..core.domain.models import CveDetails, CveInfo, CveSource, Vulnerability
from ..core.ports.advisor_port import AdvisorPort
from ..shared.cve import dedupe_sources, extract_cve_ids
from .http_client import HttpClient
from .schemas import CVE_DETAILS_RESPONSE_SCHEMA, CveDetailsPayload, GeminiResponse

logger = logging.getLogger(__name__)


def build_remediation_prompt(v: Vulnerability) -> str:
    return f"""
You are an expert API security engineer providing remediation advice for a vulnerability detected by a security scanner.

**Vulnerability Details:**
- **Type:** {v.type} ({v.owasp_id})
- **Endpoint:** {v.endpoint.method.value} {v.endpoint.path}
- **Description:** {v.description}
- **Specifics:** {v.details}

**Your Task:**
Provide a clear, actionable, and code-level remediation suggestion to fix this vulnerability.
1.  **Explain the Risk:** Briefly explain the security risk in simple terms.
2.  **Provide a Solution:** Describe the recommended approach to fix the issue.
3.  **Show Code Examples:** Provide "Before" (vulnerable) and "After" (fixed) code snippets. Assume a common backend framework like Node.js with Express, Python with Flask/Django, or Java with Spring Boot. Choose the most appropriate one for the vulnerability type.
4.  **Format the output:** Use markdown for formatting, especially for code blocks.
"""


def build_related_cves_prompt(v: Vulnerability) -> str:
    return f"""
You are a security intelligence analyst. Your task is to find publicly known CVEs (Common Vulnerabilities and Exposures) or exploits related to the following API vulnerability.

**Vulnerability Type:** "{v.type}"
**OWASP Category:** "{v.owasp_id}"
**Description:** "{v.description}"

Use your knowledge and Google Search to find relevant information.

**Your Response should include:**
1.  A brief summary of any highly relevant CVEs. For each CVE, include its ID (e.g., CVE-2023-12345) and a short description of its impact.
2.  Mention if there are well-known public exploits or attack patterns associated with this type of vulnerability.
3.  If no specific CVEs directly match, explain the general class of CVEs that this vulnerability falls under.

Keep the response concise and focused on actionable intelligence for a developer. Format the output as markdown.
"""


def build_cve_details_prompt(cve_id: str) -> str:
    return f"Provide a detailed breakdown for the following CVE: {cve_id}. Use accurate, authoritative information."


class GeminiAdvisor(AdvisorPort):
    """AdvisorPort backed by the Gemini generateContent REST API.

    Every failure (missing key, HTTP error, malformed answer) surfaces as
    AdvisorUnavailableError with the cause chained.
    """

    def __init__(
        self,
        http_client: HttpClient,
        api_key: Optional[str],
        *,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        remediation_model: str = "gemini-2.5-pro",
        cve_search_model: str = "gemini-2.5-flash",
        cve_detail_model: str = "gemini-2.5-pro",
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url
        self._remediation_model = remediation_model
        self._cve_search_model = cve_search_model
        self._cve_detail_model = cve_detail_model

    def remediation(self, v: Vulnerability) -> str:
        logger.info(f"Requesting remediation advice for {v.id}")
        response = self._generate(
            self._remediation_model,
            build_remediation_prompt(v),
            failure="Failed to communicate with the AI service.",
        )
        text = response.text
        if not text.strip():
            raise AdvisorUnavailableError("Failed to communicate with the AI service.")
        return text

    def related_cves(self, v: Vulnerability) -> CveInfo:
        logger.info(f"Searching related CVEs for {v.id} ({v.type})")
        failure = "Failed to communicate with the AI service for CVE information."
        response = self._generate(
            self._cve_search_model,
            build_related_cves_prompt(v),
            failure=failure,
            tools=[{"google_search": {}}],
        )
        summary = response.text
        if not summary.strip():
            raise AdvisorUnavailableError(failure)

        sources: list[CveSource] = []
        metadata = response.candidates[0].grounding_metadata if response.candidates else None
        for chunk in metadata.grounding_chunks if metadata else []:
            if chunk.web and chunk.web.uri and chunk.web.title:
                sources.append(CveSource(uri=chunk.web.uri, title=chunk.web.title))

        info = CveInfo(summary=summary, cve_ids=extract_cve_ids(summary), sources=dedupe_sources(sources))
        logger.debug(f"{v.id}: {len(info.cve_ids)} CVE ids, {len(info.sources)} sources")
        return info

    def cve_details(self, cve_id: str) -> CveDetails:
        logger.info(f"Requesting details for {cve_id}")
        failure = f"Failed to communicate with the AI service for details on {cve_id}."
        response = self._generate(
            self._cve_detail_model,
            build_cve_details_prompt(cve_id),
            failure=failure,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": CVE_DETAILS_RESPONSE_SCHEMA,
            },
        )
        try:
            payload = CveDetailsPayload.model_validate_json(response.text)
        except ValidationError as e:
            logger.warning(f"Malformed CVE details for {cve_id}: {e.error_count()} validation errors")
            raise AdvisorUnavailableError(failure) from e

        return CveDetails(
            cve_id=cve_id,
            description=payload.description,
            cvss_score=payload.cvss.score,
            cvss_vector=payload.cvss.vector,
            affected=payload.affected,
            references=tuple(payload.references),
        )

    def _generate(
        self,
        model: str,
        prompt: str,
        *,
        failure: str,
        tools: Optional[list[dict[str, Any]]] = None,
        generation_config: Optional[dict[str, Any]] = None,
    ) -> GeminiResponse:
        if not self._api_key:
            logger.error("No Gemini API key configured (set SENTINEL_GEMINI_API_KEY)")
            raise AdvisorUnavailableError(failure)

        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if tools:
            payload["tools"] = tools
        if generation_config:
            payload["generationConfig"] = generation_config

        url = get_generate_content_url(model, self._base_url)
        try:
            data = self._http.post_json(url, payload, headers={"x-goog-api-key": self._api_key})
            return GeminiResponse.model_validate(data)
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as e:
            logger.warning(f"Gemini call to {model} failed: {e}")
            raise AdvisorUnavailableError(failure) from e
