import os
import sys

import streamlit as st

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from frontend.api_client import GenerationClient
from frontend.camera import CameraSession
from frontend.config import API_URL, STYLES, UPLOAD_TYPES
from frontend.errors import IngestionFailed, OperationInProgress
from frontend.ingestion import download_name
from frontend.session import Mode, Session

st.set_page_config(page_title="OutlineColor AI", page_icon="🎨", layout="wide")


def log_transition(previous, current):
    if previous.mode != current.mode:
        print(f"Mode: {previous.mode.value} -> {current.mode.value}")


# Initialize session state
if 'session' not in st.session_state:
    st.session_state.session = Session()
    st.session_state.session.subscribe(log_transition)
# One HTTP session per browser session; requests.Session is not shared across threads
if 'client' not in st.session_state:
    st.session_state.client = GenerationClient(API_URL)
if 'camera' not in st.session_state:
    st.session_state.camera = CameraSession()

session = st.session_state.session
camera = st.session_state.camera
client = st.session_state.client


def on_upload():
    uploaded = st.session_state.get("upload")
    if uploaded is None:
        return
    try:
        session.ingest_file(uploaded)
    except (IngestionFailed, OperationInProgress) as e:
        print(f"Upload not ingested: {e}")


st.title("🎨 OutlineColor AI")
st.markdown("Transform your photos into art.")

with st.sidebar:
    st.header("ℹ️ How to use")
    st.markdown("""
    1. Upload a photo or take one with your camera
    2. Generate a coloring-book outline, or
    3. Pick a style and apply it
    4. Download the result
    """)
    st.markdown("---")
    st.markdown(f"**Backend:** `{API_URL}`")

# ====================
# CAMERA
# ====================
if session.state.camera_open:
    st.subheader("📷 Camera")
    frame = session.camera_preview(camera)
    if frame is not None:
        st.image(frame, channels="RGB", use_container_width=True)
        col_capture, col_refresh, col_close = st.columns(3)
        with col_capture:
            if st.button("Capture", type="primary", use_container_width=True):
                try:
                    session.capture_from_camera(camera)
                except OperationInProgress as e:
                    st.warning(str(e))
                st.rerun()
        with col_refresh:
            if st.button("🔄 Refresh", use_container_width=True):
                st.rerun()
        with col_close:
            if st.button("Close", use_container_width=True):
                session.close_camera(camera)
                st.rerun()
    st.markdown("---")

col_controls, col_result = st.columns(2)
busy = session.state.busy
generate_clicked = False
apply_clicked = False

# ====================
# CONTROLS
# ====================
with col_controls:
    st.header("1. Add Your Image")
    st.file_uploader(
        "Upload Image",
        type=UPLOAD_TYPES,
        key="upload",
        on_change=on_upload,
        disabled=busy
    )
    if st.button("📷 Use Camera", use_container_width=True, disabled=busy or session.state.camera_open):
        session.open_camera(camera)
        st.rerun()

    original = session.state.original
    if original is not None:
        st.subheader("Original")
        st.image(original.to_bytes(), use_container_width=True)

        st.header("2. Create Your Art")
        generate_clicked = st.button(
            "Generate Coloring Outline", type="primary", use_container_width=True, disabled=busy
        )

        st.subheader("Or, Apply an Artistic Style")
        style = st.radio(
            "Style",
            STYLES,
            index=STYLES.index(session.state.style),
            horizontal=True,
            disabled=busy
        )
        if style != session.state.style:
            session.select_style(style)
        apply_clicked = st.button(
            f"Apply Style: {session.state.style}", use_container_width=True, disabled=busy
        )

# ====================
# RESULT
# ====================
with col_result:
    st.header("Result")
    try:
        if generate_clicked:
            with st.spinner("Generating outline..."):
                session.generate_outline(client)
        elif apply_clicked:
            with st.spinner(f"Applying {session.state.style}..."):
                session.apply_style(client)
    except OperationInProgress as e:
        st.warning(str(e))

    state = session.state
    if state.error:
        st.error(state.error)

    result = state.visible_result
    if result is not None:
        st.image(result.to_bytes(), use_container_width=True)
        st.download_button(
            "⬇️ Download",
            data=result.to_bytes(),
            file_name=download_name(result),
            mime=result.mime_type,
            use_container_width=True
        )
    elif state.mode is Mode.IDLE and not state.error:
        st.info("Your generated art will appear here.")
