from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GeminiPart(BaseModel):
	model_config = ConfigDict(extra="ignore")
	text: Optional[str] = None


class GeminiContent(BaseModel):
	model_config = ConfigDict(extra="ignore")
	role: Optional[str] = None
	parts: list[GeminiPart] = Field(default_factory=list)


class GeminiWebSource(BaseModel):
	"""Grounding citation returned by the Google Search tool"""
	uri: Optional[str] = None
	title: Optional[str] = None


class GeminiGroundingChunk(BaseModel):
	web: Optional[GeminiWebSource] = None


class GeminiGroundingMetadata(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)
	grounding_chunks: list[GeminiGroundingChunk] = Field(default_factory=list, alias="groundingChunks")


class GeminiCandidate(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)
	content: Optional[GeminiContent] = None
	finish_reason: Optional[str] = Field(None, alias="finishReason")
	grounding_metadata: Optional[GeminiGroundingMetadata] = Field(None, alias="groundingMetadata")


class GeminiResponse(BaseModel):
	"""Top level of a generateContent response"""
	model_config = ConfigDict(extra="ignore")
	candidates: list[GeminiCandidate] = Field(default_factory=list)

	@property
	def text(self) -> str:
		if not self.candidates or self.candidates[0].content is None:
			return ""
		return "".join(p.text or "" for p in self.candidates[0].content.parts)


class CvssPayload(BaseModel):
	score: float
	vector: str


class CveDetailsPayload(BaseModel):
	"""JSON shape requested from the model for a single CVE"""
	description: str
	cvss: CvssPayload
	affected: str
	references: list[str]


# Schema sent as generationConfig.responseSchema (OpenAPI subset understood by Gemini)
CVE_DETAILS_RESPONSE_SCHEMA: dict = {
	"type": "OBJECT",
	"properties": {
		"description": {"type": "STRING", "description": "A detailed summary of the vulnerability."},
		"cvss": {
			"type": "OBJECT",
			"description": "CVSS scoring information.",
			"properties": {
				"score": {"type": "NUMBER", "description": "The base CVSS score, e.g., 9.8"},
				"vector": {"type": "STRING", "description": "The CVSS vector string, e.g., CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H"},
			},
			"required": ["score", "vector"],
		},
		"affected": {"type": "STRING", "description": "A summary of affected software and versions."},
		"references": {
			"type": "ARRAY",
			"description": "An array of official source URLs (e.g., from NIST, MITRE).",
			"items": {"type": "STRING"},
		},
	},
	"required": ["description", "cvss", "affected", "references"],
}
