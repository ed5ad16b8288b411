"""
Mock Transcription Pipeline

Simulates both pipeline stages for development.
No audio is uploaded and no API key is needed.

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import logging
import random
import re
from typing import Optional

from orderpad.services.transcription.base import BaseTranscriptionPipeline
from orderpad.services.transcription.text import NO_ORDER

logger = logging.getLogger(__name__)


class MockTranscriptionPipeline(BaseTranscriptionPipeline):
    """Mock pipeline returning canned orders."""

    SAMPLE_ORDERS = [
        "One large pepperoni pizza, extra cheese, with a side of garlic bread and a Diet Coke.",
        "Two burgers with fries, one without onions, and two chocolate milkshakes.",
        "Medium iced coffee, no sugar, with almond milk and a blueberry muffin.",
        "Caesar salad with grilled chicken, dressing on the side, and a glass of lemonade.",
        "Pasta carbonara, house salad, and a bottle of sparkling water.",
        "Three tacos, one vegetarian, chips and guacamole, and two iced teas.",
        "Grilled salmon with steamed vegetables, rice pilaf, and a glass of white wine.",
        "Chicken tikka masala, garlic naan, vegetable samosas, and mango lassi.",
    ]

    def __init__(self, latency: float = 1.5, seed: Optional[int] = None):
        self.latency = latency
        self._random = random.Random(seed)
        logger.info(f"MockTranscriptionPipeline initialized (latency={latency}s)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def transcribe(self, audio_uri: str, credential: Optional[str]) -> str:
        """Pick a sample order; the recording is not read."""
        await self._simulate_latency()
        text = self._random.choice(self.SAMPLE_ORDERS)
        logger.info(f"Mock transcription for {audio_uri}: {text[:50]}...")
        return text

    async def extract_order_items(self, raw_text: str, credential: Optional[str]) -> str:
        """Split the sentence into one item per line."""
        parts = re.split(r",\s*(?:and\s+)?|\s+and\s+", raw_text.strip().rstrip("."))
        items = [part.strip() for part in parts if part.strip()]
        if not items:
            return NO_ORDER
        return "\n".join(item[0].upper() + item[1:] for item in items)
