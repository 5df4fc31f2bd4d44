"""
Application configuration and paths.
"""
import os
from datetime import timedelta
from pathlib import Path

# Application identity
APP_NAME = 'ScriptNarrator'
APP_VERSION = '0.1.0'

# Server configuration
SERVER_HOST = os.environ.get('NARRATOR_HOST', '0.0.0.0')
SERVER_PORT = int(os.environ.get('PORT', '5000'))

# Comma-separated list, '*' allows any origin
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get('CORS_ORIGINS', '*').split(',')
    if origin.strip()
]

# Paths
SCRIPT_DIR = Path(__file__).parent.parent

# Generated audio and cached voice previews share this directory
ARTIFACT_DIR = Path(os.environ.get('NARRATOR_ARTIFACT_DIR', SCRIPT_DIR / 'public'))

# URL prefix the artifact directory is mounted under
FILES_URL_PREFIX = '/files'

# Built frontend (optional)
FRONTEND_DIR = Path(os.environ.get('NARRATOR_FRONTEND_DIR', SCRIPT_DIR / 'build'))

# Artifact naming
AUDIO_EXTENSION = 'mp3'
AUDIO_MEDIA_TYPE = 'audio/mpeg'
GENERATED_PREFIX = 'audio'
PREVIEW_PREFIX = 'preview'

# Speech provider
DEFAULT_VOICE = 'en-US-ChristopherNeural'
VOICE_RATE = '+0%'
VOICE_VOLUME = '+0%'
VOICE_PITCH = '+0Hz'
PREVIEW_TEXT = 'Hello! I am the personal assistant for the Manga Epicenter text-to-audio converter.'

# Segmentation
MAX_SEGMENT_LENGTH = 2000

# Retry policy (fixed delay, not exponential)
MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 2.0

# Pause after every synthesized segment to stay under the provider rate limit
INTER_SEGMENT_PAUSE_SECONDS = 0.05

# Duration heuristic
CHARS_PER_SECOND = 15

# Reclamation
JOB_TTL = timedelta(hours=1)
SWEEP_INTERVAL_SECONDS = 15 * 60

# How long shutdown waits for in-flight jobs before cancelling them
SHUTDOWN_GRACE_SECONDS = 5.0


def ensure_directories():
    """Create required directories if they don't exist."""
    ARTIFACT_DIR.mkdir(parents=True, exist_ok=True)
