"""Short AI narration for a selected place."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from ..providers.base import RawPlace
from .cancellation import CancellationToken
from .logging import logger

UNKNOWN_PLACE = "Unknown place"

PROMPT_TEMPLATE = """You are a tourist guide AI. Write a very short description of the place below for a driver, in {language}.

{location_info}

Rules:
- Finish within two lines
- Short sentences that are easy to read while driving
- Mention only the single most important feature of this place
- Avoid jargon and keep it plain

Example: "A historic shrine known for its beautiful garden. Especially popular in cherry blossom season."
"""


class TextGenerator(Protocol):
    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        *,
        token: Optional[CancellationToken] = None,
    ) -> str:
        ...


@dataclass(frozen=True)
class DescriptionRequest:
    subject: str
    name: str
    category: Optional[str]
    address: Optional[str]


@dataclass(frozen=True)
class DescriptionSnapshot:
    subject: Optional[str]
    text: str
    generating: bool
    error: Optional[BaseException]


def format_address(place: RawPlace, home_country: Optional[str] = None) -> Optional[str]:
    parts = []
    if place.country and place.country != home_country:
        parts.append(place.country)
    if place.region:
        parts.append(place.region)
    if place.city:
        parts.append(place.city)
    if parts:
        return ", ".join(parts)
    return place.address_full or None


def build_request(place: RawPlace, home_country: Optional[str] = None) -> DescriptionRequest:
    return DescriptionRequest(
        subject=place.place_id,
        name=place.name or UNKNOWN_PLACE,
        category=place.category or None,
        address=format_address(place, home_country),
    )


def build_prompt(request: DescriptionRequest, language: str = "English") -> str:
    info = f"Place name: {request.name}"
    if request.category:
        info += f"\nCategory: {request.category}"
    if request.address:
        info += f"\nAddress: {request.address}"
    return PROMPT_TEMPLATE.format(language=language, location_info=info)


Listener = Callable[[DescriptionSnapshot], None]


class PlaceDescriber:
    """
    Requests a description per selected place.

    A repeat request for the same place inside the cool-down window is
    dropped; a request for another place replaces whatever is in flight.
    """

    def __init__(
        self,
        generator: TextGenerator,
        *,
        cooldown_s: float = 2.0,
        temperature: float = 0.7,
        language: str = "English",
        home_country: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._generator = generator
        self._cooldown_s = cooldown_s
        self._temperature = temperature
        self._language = language
        self._home_country = home_country
        self._clock = clock

        # subject -> time of its last accepted request
        self._recent: Dict[str, float] = {}

        self._subject: Optional[str] = None
        self._text = ""
        self._generating = False
        self._error: Optional[BaseException] = None

        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def snapshot(self) -> DescriptionSnapshot:
        return DescriptionSnapshot(
            subject=self._subject,
            text=self._text,
            generating=self._generating,
            error=self._error,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snap = self.snapshot
        for listener in list(self._listeners):
            listener(snap)

    def describe(self, place: RawPlace) -> bool:
        """Start a description request. Returns False when the cool-down gate drops it."""
        if self._closed:
            return False
        request = build_request(place, self._home_country)
        now = self._clock()
        self._recent = {s: t for s, t in self._recent.items() if now - t < self._cooldown_s}
        if request.subject in self._recent:
            logger.debug("description_request_dropped", subject=request.subject)
            return False
        self._recent[request.subject] = now

        self._cancel_current()
        token = CancellationToken()
        self._token = token
        self._subject = request.subject
        self._generating = True
        self._publish()
        self._task = asyncio.get_running_loop().create_task(self._run(request, token))
        return True

    async def _run(self, request: DescriptionRequest, token: CancellationToken) -> None:
        prompt = build_prompt(request, self._language)
        try:
            text = await self._generator.generate_text(prompt, self._temperature, token=token)
        except Exception as e:
            if token.cancelled or token is not self._token:
                return
            logger.warning("description_failed", subject=request.subject, error=str(e))
            self._text = ""
            self._error = e
            self._generating = False
            self._publish()
            return

        if token.cancelled or token is not self._token:
            return
        self._text = text
        self._error = None
        self._generating = False
        self._publish()

    async def wait_settled(self) -> None:
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def clear(self) -> None:
        self._cancel_current()
        self._text = ""
        self._error = None
        self._generating = False
        self._publish()

    def close(self) -> None:
        self._closed = True
        self._cancel_current()
        self._generating = False
        self._listeners.clear()

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
