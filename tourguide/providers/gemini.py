# tourguide/providers/gemini.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..core.cancellation import CancellationToken
from ..core.config import GEMINI_ENDPOINT
from ..core.credentials import is_api_key_valid
from ..core.errors import (
    CredentialMissing,
    EncodingError,
    HttpError,
    InvalidEndpoint,
    InvalidInput,
    InvalidResponseShape,
    NetworkError,
    NoContent,
)
from ..core.logging import logger


class GeminiPart(BaseModel):
    text: str


class GeminiContent(BaseModel):
    parts: List[GeminiPart] = []


class GenerationConfig(BaseModel):
    temperature: Optional[float] = None
    topK: Optional[int] = None
    topP: Optional[float] = None
    maxOutputTokens: Optional[int] = None
    stopSequences: Optional[List[str]] = None


class GeminiRequest(BaseModel):
    contents: List[GeminiContent]
    generationConfig: Optional[GenerationConfig] = None


class SafetyRating(BaseModel):
    category: str
    probability: str


class GeminiCandidate(BaseModel):
    content: Optional[GeminiContent] = None
    finishReason: Optional[str] = None
    index: Optional[int] = None
    safetyRatings: Optional[List[SafetyRating]] = None


class PromptFeedback(BaseModel):
    safetyRatings: Optional[List[SafetyRating]] = None


class GeminiResponse(BaseModel):
    candidates: Optional[List[GeminiCandidate]] = None
    promptFeedback: Optional[PromptFeedback] = None


@dataclass(frozen=True)
class GeminiConfig:
    api_key: Optional[str]
    endpoint: str = GEMINI_ENDPOINT

    # Generation parameters; fixed, never derived from the prompt.
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024
    stop_sequences: Optional[List[str]] = None

    # Per-request timeout, and a cap on the whole exchange.
    request_timeout_s: float = 30.0
    resource_timeout_s: float = 60.0


class GeminiTextClient:
    """
    Single-attempt client for Gemini generateContent:
      - POST <endpoint>?key=<api key>
      - body: {contents:[{parts:[{text}]}], generationConfig:{...}}

    Every failure is mapped onto the TourGuideError taxonomy.
    """

    def __init__(self, cfg: GeminiConfig, client: Optional[httpx.AsyncClient] = None):
        self.cfg = cfg
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.cfg.request_timeout_s))
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GeminiTextClient must be used with 'async with' or provide a client.")
        return self._client

    def _url(self) -> httpx.URL:
        try:
            url = httpx.URL(self.cfg.endpoint)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidEndpoint(f"invalid endpoint: {self.cfg.endpoint!r}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidEndpoint(f"invalid endpoint: {self.cfg.endpoint!r}")
        return url.copy_merge_params({"key": self.cfg.api_key})

    def _body(self, prompt: str, temperature: float) -> bytes:
        request = GeminiRequest(
            contents=[GeminiContent(parts=[GeminiPart(text=prompt)])],
            generationConfig=GenerationConfig(
                temperature=temperature,
                topK=self.cfg.top_k,
                topP=self.cfg.top_p,
                maxOutputTokens=self.cfg.max_output_tokens,
                stopSequences=self.cfg.stop_sequences,
            ),
        )
        try:
            return request.model_dump_json(exclude_none=True).encode("utf-8")
        except (ValueError, TypeError) as e:
            raise EncodingError(e) from e

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        *,
        token: Optional[CancellationToken] = None,
    ) -> str:
        if not is_api_key_valid(self.cfg.api_key):
            raise CredentialMissing("Gemini API key is not configured")
        if not prompt or not prompt.strip():
            raise InvalidInput("prompt must not be empty")
        if not 0.0 <= temperature <= 2.0:
            raise InvalidInput(f"temperature {temperature} outside [0.0, 2.0]")
        url = self._url()
        body = self._body(prompt, temperature)

        if token is not None:
            token.raise_if_cancelled()
        try:
            resp = await asyncio.wait_for(
                self.client.post(url, content=body, headers={"Content-Type": "application/json"}),
                timeout=self.cfg.resource_timeout_s,
            )
        except httpx.DecodingError as e:
            logger.warning("gemini_body_undecodable", error=str(e))
            raise EncodingError(e) from e
        except (httpx.RequestError, asyncio.TimeoutError) as e:
            logger.warning("gemini_request_failed", error=str(e) or type(e).__name__)
            raise NetworkError(e) from e
        if token is not None:
            token.raise_if_cancelled()

        if not 200 <= resp.status_code <= 299:
            logger.warning("gemini_http_error", status_code=resp.status_code)
            raise HttpError(resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise EncodingError(e) from e
        if not isinstance(data, dict):
            raise InvalidResponseShape("Expected JSON object response")
        try:
            parsed = GeminiResponse.model_validate(data)
        except ValidationError as e:
            raise InvalidResponseShape(str(e)) from e

        if not parsed.candidates:
            raise NoContent("response has no candidates")
        content = parsed.candidates[0].content
        if content is None or not content.parts:
            raise NoContent("first candidate has no parts")
        return content.parts[0].text
