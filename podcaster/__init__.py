"""
Podcaster - AI podcast generator

Turns a topic and a speaker roster into a Gemini-written dialogue script,
voices every line with Google Cloud Text-to-Speech or the local OS voice,
and stitches the clips into a single MP3 served under /audio/.
"""

__version__ = "0.1.0"
