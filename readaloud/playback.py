# readaloud/playback.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from readaloud.client import ExtractionClient
from readaloud.config import (
    VOICE_NAME_FILTER,
    RATE_MIN,
    RATE_MAX,
    PITCH_MIN,
    PITCH_MAX,
    DEFAULT_RATE,
    DEFAULT_PITCH,
)
from readaloud.errors import NetworkError, UserInputError
from readaloud.speech import SpeechEngine, SpeechCallbacks, Voice, VoicePolicy, name_contains

logger = logging.getLogger(__name__)

NO_PDF_SELECTED = "No PDF selected"
UPLOAD_SUCCEEDED = "File processed successfully!"
UPLOAD_FAILED = "Error during file upload: "
UNKNOWN_ERROR = "An unknown error occurred"
NO_VOICES = f"No {VOICE_NAME_FILTER} voices available"


class ClientState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    READY = "ready"
    SPEAKING = "speaking"
    PAUSED = "paused"
    ERROR = "error"


@dataclass(frozen=True)
class VoiceOption:
    label: str
    value: str
    enabled: bool = True


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(float(value), high))


class ReaderSession:
    """
    Client side of the upload -> read aloud flow.

    One instance per user. It owns the text being read, the voice settings
    and a single ClientState; the speech engine reports back through
    callbacks, possibly from another thread.
    """

    def __init__(
        self,
        engine: SpeechEngine,
        client: Optional[ExtractionClient] = None,
        voice_policy: Optional[VoicePolicy] = None,
    ):
        self.engine = engine
        self.client = client or ExtractionClient()
        self.voice_policy = voice_policy or name_contains(VOICE_NAME_FILTER)

        self._lock = threading.RLock()
        # identifies the utterance whose callbacks may still change state
        self._active: Optional[object] = None

        self.state = ClientState.IDLE
        self.text = ""
        self.message = ""
        self.voices: List[Voice] = []
        self.selected_voice: Optional[Voice] = None
        self.rate = DEFAULT_RATE
        self.pitch = DEFAULT_PITCH

        self.refresh_voices()
        engine.on_voices_changed(self.refresh_voices)

    # -------- upload --------

    def submit(self, file) -> bool:
        """
        Upload the chosen file (anything with .name and .getvalue()).
        Returns True when text came back.
        """
        try:
            filename, data = self._selected_file(file)
        except UserInputError as e:
            self.message = str(e)
            return False

        if self.state in (ClientState.SPEAKING, ClientState.PAUSED):
            self.stop()

        with self._lock:
            self.state = ClientState.UPLOADING
            self.message = ""

        payload: Dict = {}
        message = UNKNOWN_ERROR
        ok = False
        try:
            payload = self.client.upload(filename, data)
            ok = True
        except NetworkError as e:
            message = UPLOAD_FAILED + str(e)
        finally:
            with self._lock:
                if ok:
                    self.text = payload.get("text", "")
                    self.message = payload.get("message") or UPLOAD_SUCCEEDED
                    self.state = ClientState.READY
                else:
                    self.message = message
                    self.state = ClientState.ERROR
        return ok

    @staticmethod
    def _selected_file(file) -> Tuple[str, bytes]:
        if file is None:
            raise UserInputError(NO_PDF_SELECTED)
        return getattr(file, "name", "upload.pdf"), file.getvalue()

    def set_text(self, text: str) -> None:
        with self._lock:
            self.text = text
            if self.state == ClientState.IDLE and text.strip():
                self.state = ClientState.READY

    # -------- voices & settings --------

    def refresh_voices(self) -> None:
        voices = [v for v in self.engine.list_voices() if self.voice_policy(v)]
        with self._lock:
            self.voices = voices
            if self.selected_voice not in voices:
                self.selected_voice = voices[0] if voices else None
        logger.debug("%d voices available after filtering", len(voices))

    def voice_options(self) -> List[VoiceOption]:
        if not self.voices:
            return [VoiceOption(label=NO_VOICES, value="", enabled=False)]
        return [VoiceOption(label=v.name, value=v.name) for v in self.voices]

    def select_voice(self, name: str) -> bool:
        for v in self.voices:
            if v.name == name:
                self.selected_voice = v
                return True
        return False

    def set_rate(self, rate: float) -> None:
        self.rate = clamp(rate, RATE_MIN, RATE_MAX)

    def set_pitch(self, pitch: float) -> None:
        self.pitch = clamp(pitch, PITCH_MIN, PITCH_MAX)

    # -------- playback --------

    def read(self) -> bool:
        voice = self.selected_voice
        if voice is None or not self.text.strip():
            return False

        with self._lock:
            self._active = None
        if self.engine.speaking or self.engine.paused:
            self.engine.cancel()

        token = object()
        with self._lock:
            self._active = token

        callbacks = SpeechCallbacks(
            on_start=lambda: self._on_engine(token, ClientState.SPEAKING),
            on_pause=lambda: self._on_engine(token, ClientState.PAUSED),
            on_resume=lambda: self._on_engine(token, ClientState.SPEAKING),
            on_end=lambda: self._on_engine(token, ClientState.READY, finished=True),
            on_interrupt=lambda: self._on_engine(token, self._stopped_state(), finished=True),
        )
        self.engine.speak(self.text, voice, self.rate, self.pitch, callbacks)
        return True

    def pause(self) -> bool:
        if self.state != ClientState.SPEAKING:
            return False
        self.engine.pause()
        with self._lock:
            if self.state == ClientState.SPEAKING:
                self.state = ClientState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state != ClientState.PAUSED:
            return False
        self.engine.resume()
        with self._lock:
            if self.state == ClientState.PAUSED:
                self.state = ClientState.SPEAKING
        return True

    def stop(self) -> None:
        with self._lock:
            self._active = None
        self.engine.cancel()
        with self._lock:
            if self.state in (ClientState.SPEAKING, ClientState.PAUSED):
                self.state = self._stopped_state()

    def close(self) -> None:
        """Detach from the shared engine; stops this session's utterance if it is playing."""
        if self._active is not None:
            self.stop()
        self.engine.remove_voices_changed(self.refresh_voices)

    def _stopped_state(self) -> ClientState:
        return ClientState.READY if self.text.strip() else ClientState.IDLE

    def _on_engine(self, token: object, state: ClientState, finished: bool = False) -> None:
        with self._lock:
            if self._active is not token:
                return
            if finished:
                self._active = None
            self.state = state

    # -------- button enablement --------

    @property
    def can_upload(self) -> bool:
        return self.state != ClientState.UPLOADING

    @property
    def can_read(self) -> bool:
        return (
            self.selected_voice is not None
            and bool(self.text.strip())
            and self.state not in (ClientState.UPLOADING, ClientState.SPEAKING, ClientState.PAUSED)
        )

    @property
    def can_pause(self) -> bool:
        return self.state == ClientState.SPEAKING

    @property
    def can_resume(self) -> bool:
        return self.state == ClientState.PAUSED

    @property
    def can_stop(self) -> bool:
        return self.state in (ClientState.SPEAKING, ClientState.PAUSED)
