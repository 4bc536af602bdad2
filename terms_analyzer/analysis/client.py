from __future__ import annotations

import logging
import os
from typing import Optional

import anthropic
from anthropic import APIConnectionError, APIError, APIStatusError, APITimeoutError

from terms_analyzer.analysis.config import PipelineConfig
from terms_analyzer.analysis.errors import (
    ConfigurationError,
    ModelError,
    ModelHTTPError,
    ModelTimeoutError,
    NetworkError,
    ParseError,
)
from terms_analyzer.analysis.models import AnalysisData
from terms_analyzer.analysis.prompts import select_prompt
from terms_analyzer.analysis.repair import parse_model_json
from terms_analyzer.analysis.validation import ValidationFailed, validate_analysis

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


def get_api_key() -> Optional[str]:
    return os.environ.get("ANTHROPIC_API_KEY") or None


def get_model() -> str:
    return os.environ.get("CLAUDE_MODEL", DEFAULT_MODEL)


class ModelClient:
    """Sends one document (or chunk) to the model and returns a validated analysis."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is required for model analysis")
        self.model = model or get_model()
        self.config = config or PipelineConfig()
        # rate limits are handled by sequential calls, not SDK retries
        self._client = anthropic.Anthropic(
            api_key=api_key,
            timeout=self.config.request_timeout_seconds,
            max_retries=0,
        )

    @classmethod
    def from_env(cls, config: Optional[PipelineConfig] = None) -> ModelClient:
        api_key = get_api_key()
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")
        return cls(api_key=api_key, config=config)

    def _complete(self, system: str, prompt: str, max_tokens: int) -> str:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=self.config.temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as exc:
            logger.error(
                "Model call timed out after %ss", self.config.request_timeout_seconds
            )
            raise ModelTimeoutError(str(exc)) from exc
        except APIConnectionError as exc:
            logger.error("Model endpoint unreachable: %s", exc)
            raise NetworkError(str(exc)) from exc
        except APIStatusError as exc:
            body = exc.response.text if exc.response is not None else None
            logger.error("Model endpoint returned HTTP %s: %s", exc.status_code, body)
            raise ModelHTTPError(exc.status_code, body) from exc
        except APIError as exc:
            logger.error("Model call failed: %s", exc)
            raise ModelError(str(exc)) from exc

        text = "".join(
            getattr(block, "text", "") or "" for block in (response.content or [])
        )
        if not text.strip():
            raise ParseError("No response text from model")
        return text

    def analyze_one(
        self,
        text: str,
        chunk_number: Optional[int] = None,
        total_chunks: Optional[int] = None,
    ) -> AnalysisData:
        """Analyze a whole document, or chunk ``chunk_number`` of ``total_chunks``."""
        template = select_prompt(chunk_number)
        if chunk_number is None:
            prompt = template.render(document=text)
            max_tokens = self.config.single_max_tokens
        else:
            prompt = template.render(
                document=text,
                chunk_number=chunk_number,
                total_chunks=total_chunks or chunk_number,
            )
            max_tokens = self.config.chunk_max_tokens

        raw_text = self._complete(template.system, prompt, max_tokens)
        result = validate_analysis(parse_model_json(raw_text))
        if isinstance(result, ValidationFailed):
            raise ParseError(result.error)
        analysis = result.analysis

        logger.info(
            "Model analysis succeeded (%s v%s, model=%s)",
            template.name,
            template.version,
            self.model,
        )
        return analysis
