import json
import logging
import re
from typing import List, Optional, Sequence

import google.generativeai as genai
from pydantic import TypeAdapter, ValidationError

from podcaster.config import settings
from podcaster.models import DialogueLine
from podcaster.services.errors import ScriptFormatError

logger = logging.getLogger("podcaster.gemini")

genai.configure(api_key=settings.GEMINI_API_KEY)

NO_GUESTS = "No guests"
NO_INFO = "No extra information provided"

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_script_adapter = TypeAdapter(List[DialogueLine])

def build_prompt(topic: str, host: str, guests: Sequence[str], info: Optional[str] = None) -> str:
    guest_list = ", ".join(guests) if guests else NO_GUESTS
    return f"""
You are a professional podcast scriptwriter. Write a 15-minute podcast script on the topic: "{topic}".
Podcast details:
- Host: {host}
- Guests: {guest_list}
- Additional info: {info or NO_INFO}

Instructions:
- Write in a natural, conversational style suitable for humans speaking aloud.
- Each line should be an object in an array with keys:
  {{ "speaker": "SpeakerName", "text": "Dialogue" }}
- Format output ONLY as a JSON array of objects. Do NOT include any extra explanation or text outside the array.
- Each guest should have a distinct voice and speaking style.
- Include: engaging introduction, discussion points, short stories or examples, and conclusion with a call to action.
- IMPORTANT: Use speaker names EXACTLY as provided for the host and guests: Host is "{host}" and guests are: {guest_list}. Do not invent new names.
"""

async def generate_podcast_script(prompt: str, model_name: Optional[str] = None) -> str:
    """Sends the prompt to Gemini and returns the raw response text."""
    model = genai.GenerativeModel(model_name or settings.GEMINI_MODEL)
    response = await model.generate_content_async(prompt)
    return response.text

def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw or "").strip()

def parse_script(raw: str) -> List[DialogueLine]:
    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e} | Content: {cleaned[:100]}...")
        raise ScriptFormatError("AI output invalid format.") from e

    if not isinstance(data, list) or not data:
        raise ScriptFormatError("AI output invalid format.")
    try:
        return _script_adapter.validate_python(data)
    except ValidationError as e:
        logger.error(f"Script validation error: {e.error_count()} problem(s) in AI output")
        raise ScriptFormatError("AI output invalid format.") from e
