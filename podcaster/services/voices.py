"""
Voice selection by speaker gender.

Local voices are the stock voices shipped with each OS speech engine
(SAPI5 on Windows, NSSpeechSynthesizer on macOS, espeak elsewhere).
"""

import sys
from typing import Optional

# bucket -> (male, female)
LOCAL_VOICES = {
    "windows": ("Microsoft David Desktop", "Microsoft Zira Desktop"),
    "mac": ("Alex", "Samantha"),
    "linux": ("en+m3", "en+f3"),
}

def platform_bucket(platform: Optional[str] = None) -> str:
    platform = platform if platform is not None else sys.platform
    if platform.startswith("win") or platform == "cygwin":
        return "windows"
    if platform == "darwin":
        return "mac"
    return "linux"

def select_local_voice(gender: Optional[str], platform: Optional[str] = None) -> str:
    """Returns the OS voice name for a speaker; anything but "male" gets the female voice."""
    male, female = LOCAL_VOICES[platform_bucket(platform)]
    return male if gender == "male" else female

def select_cloud_gender(gender: Optional[str]) -> str:
    if gender == "male":
        return "MALE"
    if gender == "female":
        return "FEMALE"
    return "NEUTRAL"
