"""
Streamlit web interface for the Image to Code pipeline.

Upload an image, preview it, and generate HTML and CSS that replicate it.
"""

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from image2code.config import DEFAULT_MODELS, Settings
from image2code.models import ImageCandidate
from image2code.orchestration import (
    FailedState,
    PreviewingState,
    ReadyState,
    UploadSession,
)
from image2code.pipeline.generation import CodeGenerator

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="Image to Code",
    page_icon="🖼️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        margin-bottom: 1rem;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #666;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)

# Initialize session state
if "upload_session" not in st.session_state:
    st.session_state.upload_session = UploadSession()
if "upload_key" not in st.session_state:
    st.session_state.upload_key = 0
if "last_upload_id" not in st.session_state:
    st.session_state.last_upload_id = None


def main():
    """Main application entry point."""

    st.markdown('<div class="main-header">🖼️ Image to Code</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Convert your images to HTML and CSS with ease</div>',
        unsafe_allow_html=True
    )

    with st.sidebar:
        st.header("⚙️ Configuration")

        provider = st.selectbox(
            "Provider",
            list(DEFAULT_MODELS),
            index=0,
            help="Select the LLM provider for generation"
        )
        model_name = st.text_input("Model", value=DEFAULT_MODELS[provider])
        temperature = st.slider(
            "Temperature",
            min_value=0.0,
            max_value=1.0,
            value=0.3,
            step=0.1,
            help="Lower = more deterministic, Higher = more creative"
        )
        timeout = st.number_input("Timeout (s)", min_value=5, max_value=600, value=60, step=5)

    session: UploadSession = st.session_state.upload_session

    upload_col, result_col = st.columns(2)

    with upload_col:
        upload_panel(session, provider, model_name, temperature, timeout)

    with result_col:
        result_panel(session)


def upload_panel(session, provider, model_name, temperature, timeout):
    """Image selection, preview and submission."""

    st.header("📤 Upload Image")

    uploaded = st.file_uploader(
        "Drag and drop an image (max 1MB)",
        type=["png", "jpg", "jpeg", "gif", "webp"],
        key=f"image_upload_{st.session_state.upload_key}"
    )

    if uploaded is not None and uploaded.file_id != st.session_state.last_upload_id:
        st.session_state.last_upload_id = uploaded.file_id
        session.select(ImageCandidate(
            filename=uploaded.name,
            media_type=uploaded.type or "",
            data=uploaded.getvalue()
        ))

    state = session.state
    preview = getattr(state, "preview", None)
    if preview is not None:
        st.markdown(
            f'<img src="{preview.data_uri}" alt="Preview" style="max-width:100%;border-radius:0.5rem">',
            unsafe_allow_html=True
        )
        st.caption(state.asset.filename or "Selected image")

    if isinstance(state, FailedState) and state.asset is None:
        st.error(f"❌ {state.error_message}")

    can_submit = isinstance(state, (PreviewingState, ReadyState)) or (
        isinstance(state, FailedState) and state.asset is not None
    )

    button_col, reset_col = st.columns(2)
    with button_col:
        generate_clicked = st.button("🚀 Generate Code", type="primary", disabled=not can_submit)
    with reset_col:
        if st.button("↩️ Reset"):
            session.reset()
            st.session_state.upload_key += 1
            st.session_state.last_upload_id = None
            st.rerun()

    if generate_clicked:
        try:
            settings = Settings.from_env(
                provider=provider,
                model_name=model_name,
                temperature=temperature,
                timeout=float(timeout)
            )
        except ValueError as e:
            st.error(f"❌ Configuration error: {e}")
            return

        with st.spinner("🔄 Generating HTML and CSS..."):
            session.run(CodeGenerator.from_settings(settings))

        st.rerun()


def result_panel(session):
    """Generated code and rendered preview."""

    st.header("💻 Generated Code")

    state = session.state
    if isinstance(state, FailedState) and state.asset is not None:
        st.error(f"❌ Failed to generate code: {state.error_message}")
        return

    if not isinstance(state, ReadyState):
        st.info("👈 Upload an image and click 'Generate Code' first.")
        return

    pair = state.result

    st.subheader("HTML")
    st.code(pair.markup, language="html", line_numbers=True)
    st.download_button(
        label="⬇️ Download HTML",
        data=pair.markup,
        file_name="index.html",
        mime="text/html"
    )

    st.subheader("CSS")
    st.code(pair.stylesheet, language="css", line_numbers=True)
    st.download_button(
        label="⬇️ Download CSS",
        data=pair.stylesheet,
        file_name="styles.css",
        mime="text/css"
    )

    with st.expander("🖥️ Rendered Preview", expanded=False):
        components.html(pair.render_document(), height=600, scrolling=True)


if __name__ == "__main__":
    main()
