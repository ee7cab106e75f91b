"""OCR engine router: an ordered cascade of OCR attempts.

Each attempt declares when it applies and runs only while no text has been
obtained yet. The first attempt that yields non-empty text wins. Calls are
strictly sequential.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from models import InputKind, OcrEngine, OcrResult
from ocr_clients import DirectVisionClient, OcrServiceError, TextLayerOcrClient, VisionOcrClient

logger = logging.getLogger(__name__)


@dataclass
class RouteState:
    """Mutable bookkeeping for one pass through the cascade."""

    kind: InputKind
    text: str = ""
    engine: OcrEngine = OcrEngine.NONE
    failed: set[str] = field(default_factory=set)
    attempted: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OcrAttempt:
    name: str
    applies: Callable[[RouteState], bool]
    engine: Callable[[RouteState], OcrEngine]
    run: Callable[[str], str]


class OcrRouter:
    """Runs the OCR cascade for one document."""

    def __init__(
        self,
        text_layer: TextLayerOcrClient,
        vision: VisionOcrClient,
        direct: DirectVisionClient,
    ):
        self._attempts: list[OcrAttempt] = [
            OcrAttempt(
                name="text_layer",
                applies=lambda s: s.kind.is_pdf,
                engine=lambda s: OcrEngine.TESSERACT,
                run=text_layer.extract_text,
            ),
            OcrAttempt(
                name="vision_service",
                applies=lambda s: s.kind.is_image or "text_layer" in s.failed or not s.kind.is_pdf,
                engine=lambda s: (
                    OcrEngine.GOOGLE_VISION_FALLBACK if "text_layer" in s.failed else OcrEngine.GOOGLE_VISION
                ),
                run=vision.extract_text,
            ),
            OcrAttempt(
                name="direct_vision",
                applies=lambda s: True,
                engine=lambda s: OcrEngine.GOOGLE_VISION_DIRECT,
                run=direct.extract_text,
            ),
        ]

    @property
    def attempts(self) -> list[OcrAttempt]:
        return list(self._attempts)

    def run(self, locator: str, kind: InputKind) -> OcrResult:
        state = RouteState(kind=kind)

        for attempt in self._attempts:
            if state.text.strip():
                break
            if not attempt.applies(state):
                continue

            engine = attempt.engine(state)
            state.attempted.append(attempt.name)
            logger.info("OCR attempt %s (engine=%s)", attempt.name, engine.value)

            try:
                text = attempt.run(locator) or ""
            except OcrServiceError as e:
                logger.warning("OCR attempt %s failed, trying next engine: %s", attempt.name, e)
                state.failed.add(attempt.name)
                continue

            if text.strip():
                state.text = text
                state.engine = engine

        if not state.text.strip():
            logger.error("All OCR methods failed to extract text (tried: %s)", ", ".join(state.attempted))
            return OcrResult(engine_used=OcrEngine.NONE, raw_text="", attempts=tuple(state.attempted))

        logger.info("OCR engine %s returned %d characters", state.engine.value, len(state.text))
        return OcrResult(engine_used=state.engine, raw_text=state.text, attempts=tuple(state.attempted))
