"""
Test Configuration and Fixtures
"""
import io

import pytest
from fastapi.testclient import TestClient
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from readaloud.api.app import app
from readaloud.speech import SpeechEngine, SpeechCallbacks, Voice


def make_pdf(lines):
    """Build a one-page PDF that draws each entry of `lines` on its own line."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setFont("Helvetica", 12)
    y = 720
    for line in lines:
        c.drawString(72, y, line)
        y -= 20
    c.showPage()
    c.save()
    return buf.getvalue()


class FakeEngine(SpeechEngine):
    """Scripted speech engine: records every call, fires callbacks on demand."""

    def __init__(self, voices=None, autostart=True):
        super().__init__()
        self.voices = list(voices or [])
        self.autostart = autostart
        self.events = []
        self.spoken = []
        self.callbacks = None
        self._speaking = False
        self._paused = False

    def list_voices(self):
        self.events.append("list_voices")
        return list(self.voices)

    def speak(self, text, voice, rate, pitch, callbacks):
        self.events.append("speak")
        self.spoken.append({"text": text, "voice": voice, "rate": rate, "pitch": pitch})
        self.callbacks = callbacks or SpeechCallbacks()
        self._speaking = True
        self._paused = False
        if self.autostart:
            self.start()

    def start(self):
        self.events.append("start")
        self.callbacks.fire("start")

    def finish(self):
        self.events.append("end")
        self._speaking = False
        self._paused = False
        self.callbacks.fire("end")

    def pause(self):
        self.events.append("pause")
        self._paused = True
        self.callbacks.fire("pause")

    def resume(self):
        self.events.append("resume")
        self._paused = False
        self.callbacks.fire("resume")

    def cancel(self):
        self.events.append("cancel")
        was_playing = self._speaking or self._paused
        self._speaking = False
        self._paused = False
        if was_playing:
            self.callbacks.fire("interrupt")

    @property
    def speaking(self):
        return self._speaking and not self._paused

    @property
    def paused(self):
        return self._paused

    def change_voices(self, voices):
        self.voices = list(voices)
        self._notify_voices_changed()


class FakeClient:
    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"text": "Hello world"}
        self.error = error
        self.calls = []

    def upload(self, filename, data, content_type="application/pdf"):
        self.calls.append((filename, data))
        if self.error is not None:
            raise self.error
        return self.payload


class FakeUpload:
    """Stands in for a Streamlit UploadedFile."""

    def __init__(self, name, data):
        self.name = name
        self._data = data

    def getvalue(self):
        return self._data


MICROSOFT_VOICES = [
    Voice(id="ms-david", name="Microsoft David Desktop"),
    Voice(id="ms-zira", name="Microsoft Zira Desktop"),
]
OTHER_VOICES = [Voice(id="espeak-en", name="english")]


@pytest.fixture(scope="session")
def api():
    """Create API test client"""
    return TestClient(app)


@pytest.fixture
def pdf_bytes():
    return make_pdf(["Hello World", "This is a   sample document."])


@pytest.fixture
def engine():
    return FakeEngine(voices=MICROSOFT_VOICES + OTHER_VOICES)


@pytest.fixture
def fake_client():
    return FakeClient()
