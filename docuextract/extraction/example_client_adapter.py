"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in ExtractionFactory.
"""

import json
from typing import ClassVar

from docuextract.extraction.client_base import BaseVisionClient


class ExampleVisionClientAdapter(BaseVisionClient):
    """Example adapter that returns a fixed valid extraction JSON.

    No network calls. Useful for local development, tests, and offline
    demos of the pipeline.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "name": "Erika Mustermann",
        "address": "Heidestrasse 17",
        "postalcode": "51147",
        "city": "Koeln",
        "birthday": "12.08.1964",
        "date": "01.03.2024",
        "time": "14:30",
        "handwritten": False,
        "signed": True,
        "stamp": "BB",
        "confidence": 90,
    }

    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        content: bytes,
        mime_type: str,
    ) -> str:
        _ = model, temperature, prompt, content, mime_type
        return f"```json\n{json.dumps(self.DEFAULT_RESPONSE)}\n```"
