# readaloud/speech.py
from __future__ import annotations

import inspect
import logging
import sys
import threading
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import pyttsx3

from readaloud.config import BASE_WORDS_PER_MINUTE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    languages: Tuple[str, ...] = ()


@dataclass
class SpeechCallbacks:
    on_start: Optional[Callable[[], None]] = None
    on_pause: Optional[Callable[[], None]] = None
    on_resume: Optional[Callable[[], None]] = None
    on_end: Optional[Callable[[], None]] = None
    # cancelled before it finished, by the caller or by another speak()
    on_interrupt: Optional[Callable[[], None]] = None

    def fire(self, event: str) -> None:
        cb = getattr(self, f"on_{event}")
        if cb is not None:
            cb()


VoicePolicy = Callable[[Voice], bool]


def name_contains(substring: str) -> VoicePolicy:
    """Keep only voices whose display name contains `substring`."""
    def _policy(voice: Voice) -> bool:
        return substring in voice.name
    return _policy


def allow_all(voice: Voice) -> bool:
    return True


class SpeechEngine(ABC):
    """
    What the playback client needs from a host speech engine.
    Implementations fire SpeechCallbacks asynchronously as the utterance
    starts, pauses, resumes and finishes on its own.
    """

    def __init__(self):
        # bound methods are held weakly so discarded sessions drop out
        self._voices_changed: List[Callable[[], Optional[Callable[[], None]]]] = []

    @abstractmethod
    def list_voices(self) -> List[Voice]:
        ...

    @abstractmethod
    def speak(self, text: str, voice: Voice, rate: float, pitch: float, callbacks: SpeechCallbacks) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def speaking(self) -> bool:
        ...

    @property
    @abstractmethod
    def paused(self) -> bool:
        ...

    def on_voices_changed(self, handler: Callable[[], None]) -> None:
        if inspect.ismethod(handler):
            ref = weakref.WeakMethod(handler)
        else:
            ref = lambda: handler
        self._voices_changed.append(ref)

    def remove_voices_changed(self, handler: Callable[[], None]) -> None:
        self._voices_changed = [r for r in self._voices_changed if r() not in (None, handler)]

    def voices_changed_handlers(self) -> List[Callable[[], None]]:
        self._voices_changed = [r for r in self._voices_changed if r() is not None]
        return [r() for r in self._voices_changed]

    def _notify_voices_changed(self) -> None:
        for handler in self.voices_changed_handlers():
            if handler is not None:
                handler()


def default_driver() -> str:
    if sys.platform.startswith("win"):
        return "sapi5"
    if sys.platform == "darwin":
        return "nsss"
    return "espeak"


def _as_str(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    return str(value)


class _Utterance:
    def __init__(self, text: str, voice: Voice, rate: float, pitch: float, callbacks: SpeechCallbacks):
        self.text = text
        self.voice = voice
        self.rate = rate
        self.pitch = pitch
        self.callbacks = callbacks
        # characters already spoken, advanced by "started-word"
        self.offset = 0
        self.interrupted = False


class Pyttsx3Engine(SpeechEngine):
    """
    SpeechEngine backed by pyttsx3 (SAPI5 / NSSpeechSynthesizer / eSpeak).

    pyttsx3 has no pause primitive, so pause stops at the current word and
    resume speaks the rest of the text from there.
    """

    # drivers that accept a "pitch" property
    PITCH_DRIVERS = {"espeak"}

    def __init__(self, driver_name: Optional[str] = None, base_wpm: int = BASE_WORDS_PER_MINUTE):
        super().__init__()
        self.driver_name = driver_name or default_driver()
        self.base_wpm = base_wpm
        self._lock = threading.Lock()
        self._engine = None
        self._thread: Optional[threading.Thread] = None
        self._utterance: Optional[_Utterance] = None
        self._paused = False
        self._known_voices: List[Voice] = []

    def list_voices(self) -> List[Voice]:
        engine = pyttsx3.init(self.driver_name)
        voices = [
            Voice(
                id=v.id,
                name=v.name or v.id,
                languages=tuple(_as_str(lang) for lang in (v.languages or [])),
            )
            for v in engine.getProperty("voices")
        ]
        changed = bool(self._known_voices) and voices != self._known_voices
        self._known_voices = voices
        if changed:
            self._notify_voices_changed()
        return voices

    @property
    def speaking(self) -> bool:
        return self._utterance is not None and not self._paused

    @property
    def paused(self) -> bool:
        return self._paused

    def speak(self, text, voice, rate, pitch, callbacks=None):
        self.cancel()
        utt = _Utterance(text, voice, rate, pitch, callbacks or SpeechCallbacks())
        with self._lock:
            self._utterance = utt
            self._paused = False
        self._start(utt, resuming=False)

    def pause(self):
        with self._lock:
            utt = self._utterance
            if utt is None or self._paused:
                return
            self._paused = True
            utt.interrupted = True
            engine = self._engine
        if engine is not None:
            engine.stop()
        self._join()
        utt.callbacks.fire("pause")

    def resume(self):
        with self._lock:
            utt = self._utterance
            if utt is None or not self._paused:
                return
            self._paused = False
            utt.interrupted = False
        self._start(utt, resuming=True)

    def cancel(self):
        with self._lock:
            utt = self._utterance
            self._utterance = None
            self._paused = False
            engine = self._engine
        if utt is None:
            return
        utt.interrupted = True
        if engine is not None:
            engine.stop()
        self._join()
        utt.callbacks.fire("interrupt")

    def _start(self, utt: _Utterance, resuming: bool) -> None:
        engine = pyttsx3.init(self.driver_name)
        self._configure(engine, utt)
        with self._lock:
            self._engine = engine
        t = threading.Thread(
            target=self._run,
            args=(engine, utt, utt.offset, resuming),
            name="pyttsx3-utterance",
            daemon=True,
        )
        self._thread = t
        t.start()

    def _configure(self, engine, utt: _Utterance) -> None:
        engine.setProperty("voice", utt.voice.id)
        engine.setProperty("rate", int(self.base_wpm * utt.rate))
        if self.driver_name in self.PITCH_DRIVERS:
            # eSpeak pitch is 0-100 with 50 as the neutral value
            engine.setProperty("pitch", int(utt.pitch * 50))
        else:
            logger.debug("Driver %s has no pitch control, ignoring pitch=%s", self.driver_name, utt.pitch)

    def _run(self, engine, utt: _Utterance, base: int, resuming: bool) -> None:
        def on_started(name):
            utt.callbacks.fire("resume" if resuming else "start")

        def on_word(name, location, length):
            utt.offset = base + location

        def on_finished(name, completed):
            if utt.interrupted:
                return
            with self._lock:
                if self._utterance is utt:
                    self._utterance = None
            utt.callbacks.fire("end")

        tokens = [
            engine.connect("started-utterance", on_started),
            engine.connect("started-word", on_word),
            engine.connect("finished-utterance", on_finished),
        ]
        try:
            engine.say(utt.text[base:])
            engine.runAndWait()
        except RuntimeError:
            # "run loop already started" when a previous loop has not unwound yet
            logger.exception("Speech engine failed")
            with self._lock:
                if self._utterance is utt:
                    self._utterance = None
                    self._paused = False
            utt.callbacks.fire("end")
        finally:
            for token in tokens:
                engine.disconnect(token)

    def _join(self) -> None:
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout=5)
