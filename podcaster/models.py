from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# "male" or "female"; anything else gets the default voice
Gender = Optional[str]

class DialogueLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: str = Field(min_length=1)
    text: str = Field(min_length=1)

class PodcastRequest(BaseModel):
    # topic/host stay optional here so the route can answer with {"error": ...}
    topic: Optional[str] = None
    host: Optional[str] = None
    guestname: Union[List[str], str, None] = None
    info: Optional[str] = None
    hostGender: Gender = None
    guestGender: Gender = None

class PodcastResponse(BaseModel):
    topic: str
    host: str
    guestname: List[str]
    script: List[DialogueLine]
    audio: str

GenderMap = Dict[str, Optional[str]]

@dataclass(frozen=True)
class SynthesisRequest:
    """One unit of backend work: a single dialogue line and its speaker's gender."""
    line: DialogueLine
    gender: Optional[str] = None
