# ui/app.py
import streamlit as st

from readaloud.client import ExtractionClient
from readaloud.config import API_BASE, RATE_MIN, RATE_MAX, PITCH_MIN, PITCH_MAX, VOICE_NAME_FILTER, PLAYBACK_POLL_SECONDS
from readaloud.errors import NetworkError
from readaloud.playback import ReaderSession, ClientState, NO_PDF_SELECTED
from readaloud.speech import Pyttsx3Engine

st.set_page_config(page_title="Read Aloud", layout="centered")


@st.cache_resource
def get_engine():
    # one host speech engine per process, shared by every session
    return Pyttsx3Engine()


def get_reader() -> ReaderSession:
    if "reader" not in st.session_state:
        st.session_state["reader"] = ReaderSession(get_engine(), ExtractionClient(API_BASE))
    return st.session_state["reader"]


def _sync_text():
    reader.set_text(st.session_state["edited_text"])


def _sync_voice():
    reader.select_voice(st.session_state["voice"])


# engine callbacks arrive on a worker thread, so poll for state changes
@st.fragment(run_every=PLAYBACK_POLL_SECONDS)
def playback_controls():
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        label = "Speaking..." if reader.state == ClientState.SPEAKING else "Read Text"
        st.button(label, key="read", on_click=reader.read, disabled=not reader.can_read)
    with col2:
        st.button("Pause", on_click=reader.pause, disabled=not reader.can_pause)
    with col3:
        st.button("Resume", on_click=reader.resume, disabled=not reader.can_resume)
    with col4:
        st.button("Stop", on_click=reader.stop, disabled=not reader.can_stop)

    st.caption(f"Status: {reader.state.value}")


reader = get_reader()

st.title("📄 Upload PDF for Text Extraction")
st.caption("Upload a PDF, edit the extracted text if needed, then have it read aloud.")

# -------- Sidebar: API status --------
with st.sidebar:
    st.header("Backend")
    if st.button("Check API health"):
        try:
            st.success(reader.client.health())
        except NetworkError as e:
            st.error(f"Health check failed: {e}")

    st.divider()
    st.write("API Base:", API_BASE)

    if st.button("Refresh voices"):
        reader.refresh_voices()

# -------- Upload section --------
with st.form("upload"):
    uploaded = st.file_uploader("Choose a PDF file to upload:")
    submitted = st.form_submit_button("Upload", disabled=not reader.can_upload)

if submitted:
    with st.spinner("Uploading..."):
        if reader.submit(uploaded):
            st.session_state["edited_text"] = reader.text

# -------- Text + playback section --------
if reader.text or reader.state == ClientState.READY:
    if "edited_text" not in st.session_state:
        st.session_state["edited_text"] = reader.text
    st.text_area("Extracted text", key="edited_text", height=150, on_change=_sync_text)

    options = reader.voice_options()
    if len(options) == 1 and not options[0].enabled:
        st.selectbox(f"Select {VOICE_NAME_FILTER} Voice:", [options[0].label], disabled=True)
        st.caption(
            f"No {VOICE_NAME_FILTER} voices available. "
            "This might be due to platform limitations."
        )
    else:
        names = [o.value for o in options]
        current = reader.selected_voice.name if reader.selected_voice else names[0]
        st.selectbox(
            f"Select {VOICE_NAME_FILTER} Voice:",
            names,
            index=names.index(current),
            key="voice",
            on_change=_sync_voice,
        )

    reader.set_rate(st.slider("Rate:", RATE_MIN, RATE_MAX, value=float(reader.rate), step=0.1))
    reader.set_pitch(st.slider("Pitch:", PITCH_MIN, PITCH_MAX, value=float(reader.pitch), step=0.1))

    playback_controls()

if reader.message:
    if reader.state == ClientState.ERROR or reader.message == NO_PDF_SELECTED:
        st.error(reader.message)
    else:
        st.success(reader.message)
