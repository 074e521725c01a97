# readaloud/config.py
import os

API_HOST = os.getenv("READ_ALOUD_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("READ_ALOUD_API_PORT", "5000"))
API_BASE = os.getenv("READ_ALOUD_API_BASE", f"http://localhost:{API_PORT}")

LOG_LEVEL = os.getenv("READ_ALOUD_LOG_LEVEL", "INFO")

# Multipart field the upload endpoint reads
UPLOAD_FIELD = "file"
UPLOAD_TIMEOUT = 300

NO_FILE_UPLOADED = "No file uploaded."
EXTRACTION_FAILED = "Failed to extract text from PDF"

# Everything from this word onwards is dropped from extracted text
TRUNCATE_AT_WORD = "References"

# Only these voices work reliably with the Windows speech engine
VOICE_NAME_FILTER = "Microsoft"

RATE_MIN, RATE_MAX = 0.1, 2.0
PITCH_MIN, PITCH_MAX = 0.0, 2.0
DEFAULT_RATE = 1.0
DEFAULT_PITCH = 1.0

# pyttsx3 speaks in words per minute; rate 1.0 maps to this
BASE_WORDS_PER_MINUTE = 200

# how often the UI re-reads playback state pushed by the speech thread
PLAYBACK_POLL_SECONDS = 0.5
