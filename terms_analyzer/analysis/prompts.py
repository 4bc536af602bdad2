from __future__ import annotations

from string import Template
from typing import Optional

from pydantic import BaseModel, ConfigDict

_CATEGORY_SHAPE = """\
    "dataPrivacy": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]},
    "userRights": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]},
    "liability": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]},
    "termination": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]},
    "contentOwnership": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]},
    "disputeResolution": {"score": 0-100, "riskLevel": "low|medium|high", "findings": ["..."]}"""

_RULES = """\
Rules:
- Return ONLY a valid JSON object, no markdown fences, no extra text
- score is an integer from 0 (user-friendly) to 100 (very risky)
- riskLevel MUST be one of: low (score 0-30), medium (31-60), high (61-100)
- Include ALL six categories; give a category that is not covered a neutral score of 50
- At most 8 concerns, 5 highlights, 3 findings per category and 5 recommendations"""


class PromptTemplate(BaseModel):
    """A named, versioned prompt with ``$slot`` placeholders in the user text."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    system: str
    user: str

    def render(self, **slots: object) -> str:
        return Template(self.user).substitute(**{k: str(v) for k, v in slots.items()})


SINGLE_DOCUMENT_PROMPT = PromptTemplate(
    name="single-document",
    version="2",
    system=(
        "You are a legal expert specializing in terms of service and privacy policy "
        "analysis. Analyze the COMPLETE document provided and answer in the requested "
        "JSON format only."
    ),
    user=(
        "Analyze the following document and provide a comprehensive risk assessment.\n\n"
        "Document to analyze:\n$document\n\n"
        "Respond with a JSON object of exactly this shape:\n"
        "{\n"
        '  "riskLevel": "low|medium|high",\n'
        '  "score": 0-100,\n'
        '  "concerns": ["specific concerns found"],\n'
        '  "highlights": ["positive aspects found"],\n'
        '  "summary": "one paragraph summary of the document",\n'
        '  "categories": {\n' + _CATEGORY_SHAPE + "\n  },\n"
        '  "recommendations": ["actionable recommendations"],\n'
        '  "keyMetrics": {\n'
        '    "readabilityScore": 0-100,\n'
        '    "lengthAnalysis": "description of document length",\n'
        '    "lastUpdated": "extracted date or null",\n'
        '    "jurisdiction": "extracted jurisdiction or null"\n'
        "  }\n"
        "}\n\n" + _RULES + "\n"
    ),
)

CHUNK_PROMPT = PromptTemplate(
    name="document-chunk",
    version="2",
    system=(
        "You are a legal expert analyzing a portion of a terms of service document. "
        "Provide specific analysis for the content in this chunk, in the requested "
        "JSON format only."
    ),
    user=(
        "You are analyzing chunk $chunk_number of $total_chunks from a terms of service "
        "document. Focus on the risks and positive aspects actually present in this "
        "section.\n\n"
        "Document chunk to analyze:\n$document\n\n"
        "Respond with a JSON object of exactly this shape:\n"
        "{\n"
        '  "riskLevel": "low|medium|high",\n'
        '  "score": 0-100,\n'
        '  "concerns": ["specific concerns found in this chunk"],\n'
        '  "highlights": ["positive aspects found in this chunk"],\n'
        '  "summary": "one sentence about this chunk",\n'
        '  "categories": {\n' + _CATEGORY_SHAPE + "\n  },\n"
        '  "recommendations": ["recommendations based on this chunk"],\n'
        '  "keyMetrics": {"readabilityScore": 0-100, "lengthAnalysis": "...", '
        '"lastUpdated": "date or null", "jurisdiction": "jurisdiction or null"}\n'
        "}\n\n" + _RULES + "\n"
    ),
)


def select_prompt(chunk_number: Optional[int]) -> PromptTemplate:
    return SINGLE_DOCUMENT_PROMPT if chunk_number is None else CHUNK_PROMPT
