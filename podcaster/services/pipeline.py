"""
Request pipeline: validate -> prompt -> generate script -> parse -> synthesize -> merge.

Every step either completes or raises a PodcastError subclass; there is no
partial result. The HTTP router decides how each failure is reported.
"""

import logging
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from podcaster.models import GenderMap, PodcastRequest, PodcastResponse
from podcaster.services.clip_synth import ClipBatch, synthesize_all
from podcaster.services.errors import PodcastRequestError
from podcaster.services.gemini_engine import build_prompt, generate_podcast_script, parse_script
from podcaster.services.merger import merge_clips
from podcaster.services.tts_selector import SynthesisConfig

logger = logging.getLogger("podcaster.pipeline")

AUDIO_URL_PREFIX = "/audio"

MISSING_FIELDS = "Please provide a topic and host name."

def parse_request(body: Any) -> PodcastRequest:
    # a missing or non-object body is treated like an empty one
    if not isinstance(body, dict):
        body = {}
    try:
        return PodcastRequest.model_validate(body)
    except ValidationError as e:
        raise PodcastRequestError(MISSING_FIELDS) from e

def validate_request(request: PodcastRequest) -> None:
    if not (request.topic or "").strip() or not (request.host or "").strip():
        raise PodcastRequestError(MISSING_FIELDS)

def normalize_guests(guestname: Union[List[str], str, None]) -> List[str]:
    if guestname is None:
        return []
    if isinstance(guestname, str):
        guestname = guestname.split(",")
    return [name.strip() for name in guestname if name and name.strip()]

def build_gender_map(host: str, guests: List[str], host_gender: Optional[str], guest_gender: Optional[str]) -> GenderMap:
    gender_map: GenderMap = {host: host_gender}
    for guest in guests:
        gender_map.setdefault(guest, guest_gender)
    return gender_map

async def produce_podcast(request: PodcastRequest, synthesis: SynthesisConfig) -> PodcastResponse:
    validate_request(request)
    topic = request.topic.strip()
    host = request.host.strip()
    guests = normalize_guests(request.guestname)

    prompt = build_prompt(topic, host, guests, request.info)
    raw_script = await generate_podcast_script(prompt)
    script = parse_script(raw_script)
    logger.info(f"Script for {topic!r}: {len(script)} line(s), {len(guests)} guest(s)")

    gender_map = build_gender_map(host, guests, request.hostGender, request.guestGender)
    with ClipBatch(synthesis.output_dir, keep_failed=synthesis.keep_failed) as batch:
        clips = await synthesize_all(script, gender_map, synthesis.backend, batch)
        final_file = await merge_clips(clips, batch.final_path(), synthesis.runner)

    return PodcastResponse(
        topic=topic,
        host=host,
        guestname=guests,
        script=script,
        audio=f"{AUDIO_URL_PREFIX}/{final_file.name}",
    )
