"""
Streamlit entry point for scan2meet.

Take a photo of a business card (or upload one), read it with a vision
model, correct the fields, then open a scheduling page, search for the
contact or ask for a research briefing.
"""

from __future__ import annotations

import hashlib
import logging

import streamlit as st

from scan2meet.capture import IMAGE_MIME_TYPES, CardImage
from scan2meet.config import Settings, get_settings
from scan2meet.extractor import BACKENDS, create_extractor, split_backend
from scan2meet.links import (
    company_search_query,
    department_search_query,
    facebook_search_url,
    google_search_url,
    mailto_url,
    tel_url,
    website_url,
)
from scan2meet.models.business_card import FIELD_LABELS, BusinessCardData
from scan2meet.preprocessing import CardCropper
from scan2meet.research import ResearchSession, create_researcher
from scan2meet.scanner import BusinessCardScanner
from scan2meet.scheduling import (
    MAX_LINKS,
    QueryParamNames,
    SchedulingLinkStore,
    build_scheduling_url,
)

LOGGER = logging.getLogger(__name__)


@st.cache_resource(show_spinner=False)
def _get_scanner(spec: str) -> BusinessCardScanner:
    """One scanner per backend spec per Streamlit process."""
    settings = get_settings()
    cropper = CardCropper(max_dim=settings.max_image_dim) if settings.auto_crop else None
    return BusinessCardScanner(create_extractor(spec, settings), cropper=cropper)


def _init_session_state() -> None:
    """Initialize keys stored in st.session_state."""
    defaults = {
        "card": None,
        "scan_error": None,
        "image_digest": None,
        "editing": False,
        "capture_round": 0,
        "research": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _reset_card() -> None:
    """Forget the current card and clear the capture widgets."""
    st.session_state.card = None
    st.session_state.scan_error = None
    st.session_state.image_digest = None
    st.session_state.editing = False
    if st.session_state.research is not None:
        st.session_state.research.reset()
    # New widget keys drop the old photo/upload
    st.session_state.capture_round += 1


def _research_session(settings: Settings) -> ResearchSession | None:
    if st.session_state.research is None:
        try:
            st.session_state.research = ResearchSession(create_researcher(settings))
        except ValueError as exc:
            LOGGER.info("Research disabled: %s", exc)
            return None
    return st.session_state.research


def _render_link_settings(store: SchedulingLinkStore) -> None:
    """Sidebar editor for up to MAX_LINKS scheduling links."""
    with st.sidebar:
        st.header("Scheduling links")
        st.caption(
            "Saved scheduling pages open with the contact's details filled in."
        )

        for link in store.links:
            with st.expander(link.label, expanded=False):
                label = st.text_input("Label", value=link.label, key=f"label_{link.id}")
                url = st.text_input("URL", value=link.url, key=f"url_{link.id}")
                save_col, delete_col = st.columns(2)
                if save_col.button("Save", key=f"save_{link.id}", disabled=not url.strip()):
                    store.update(link.id, label, url)
                    st.rerun()
                if delete_col.button("Delete", key=f"delete_{link.id}"):
                    store.remove(link.id)
                    st.rerun()

        if store.is_full:
            st.caption(f"Up to {MAX_LINKS} links can be saved.")
            return

        with st.form("add_link", clear_on_submit=True):
            label = st.text_input("Label", placeholder="e.g. 30 minute meeting")
            url = st.text_input("URL", placeholder="https://...")
            if st.form_submit_button("Add link"):
                if not url.strip():
                    st.warning("Enter a URL for the link.")
                else:
                    store.add(label, url)
                    st.rerun()


def _read_capture(backend: str) -> None:
    """Scan a newly captured or uploaded image."""
    round_ = st.session_state.capture_round
    photo = st.camera_input("Take a photo of the card", key=f"camera_{round_}")
    upload = st.file_uploader(
        "Or upload an image",
        type=[ext.lstrip(".") for ext in IMAGE_MIME_TYPES],
        key=f"upload_{round_}",
    )
    source = photo if photo is not None else upload
    if source is not None:
        _scan_image(source.getvalue(), source.type, source.name, backend)


def _scan_image(data: bytes, mime_type: str, filename: str, backend: str) -> None:
    """Scan image bytes into st.session_state.card, once per distinct image."""
    digest = hashlib.sha1(data).hexdigest()
    if digest == st.session_state.image_digest:
        return
    st.session_state.image_digest = digest
    st.session_state.editing = False
    if st.session_state.research is not None:
        st.session_state.research.reset()

    with st.spinner("Reading the business card..."):
        try:
            image = CardImage.from_bytes(data, mime_type=mime_type, filename=filename)
            st.session_state.card = _get_scanner(backend).scan(image)
            st.session_state.scan_error = None
        except ValueError as exc:
            LOGGER.exception("Card scan failed: %s", exc)
            st.session_state.card = None
            st.session_state.scan_error = f"Could not read the business card: {exc}"


def _render_search_links(card: BusinessCardData) -> None:
    links = [
        ("Google", google_search_url(card.full_name)),
        ("Facebook", facebook_search_url(card.full_name)),
        ("Company", google_search_url(company_search_query(card) or "")),
        ("Department", google_search_url(department_search_query(card) or "")),
        ("Call", tel_url(card.phone)),
        ("Email", mailto_url(card.email)),
        ("Website", website_url(card.website)),
    ]
    links = [(label, url) for label, url in links if url]
    if not links:
        return
    for col, (label, url) in zip(st.columns(len(links)), links):
        col.link_button(label, url, use_container_width=True)


def _render_card(card: BusinessCardData) -> None:
    header, toggle = st.columns([5, 1])
    header.subheader(card.full_name or "No name")
    if card.position:
        header.caption(card.position)

    if not st.session_state.editing:
        if toggle.button("Edit", key="edit_card"):
            st.session_state.editing = True
            st.rerun()
        for name, label in FIELD_LABELS.items():
            st.markdown(f"**{label}:** {getattr(card, name) or '-'}")
        _render_search_links(card)
        return

    with st.form("edit_card_form"):
        values = {
            name: st.text_input(label, value=getattr(card, name))
            for name, label in FIELD_LABELS.items()
        }
        if st.form_submit_button("Save"):
            card.update(**values)
            st.session_state.editing = False
            st.rerun()


def _scheduling_buttons(
    card: BusinessCardData, store: SchedulingLinkStore, settings: Settings
) -> list[tuple[str, str]]:
    """Label and prefilled URL for each saved scheduling link."""
    names = QueryParamNames.from_settings(settings)
    return [(link.label, build_scheduling_url(link.url, card, names)) for link in store.links]


def _render_actions(card: BusinessCardData, store: SchedulingLinkStore, settings: Settings) -> None:
    for label, url in _scheduling_buttons(card, store, settings):
        st.link_button(label, url, use_container_width=True)

    session = _research_session(settings)
    if session is not None and card.company and card.full_name:
        busy = session.state.is_loading
        if st.button(
            "AI research", key="ai_research", disabled=busy, use_container_width=True
        ):
            with st.spinner("Researching..."):
                session.execute(card)

    if st.button("Scan another card", key="scan_another", use_container_width=True):
        _reset_card()
        st.rerun()


def _render_research(session: ResearchSession | None) -> None:
    if session is None:
        return
    state = session.state
    if state.error:
        st.error(state.error)
    elif state.data is not None:
        st.subheader("Research")
        st.markdown(state.data.summary or "_No summary returned._")
        if state.data.sources:
            st.html(state.data.sources)


def main() -> None:
    st.set_page_config(page_title="scan2meet", layout="centered")
    st.title("scan2meet")
    st.caption("Turn a business card into a meeting on the spot.")

    settings = get_settings()
    _init_session_state()
    store = SchedulingLinkStore(settings.links_path)
    _render_link_settings(store)

    configured, _ = split_backend(settings.extractor_backend)
    backend = st.selectbox(
        "Model",
        BACKENDS,
        index=BACKENDS.index(configured) if configured in BACKENDS else 0,
        format_func=lambda name: settings.extractor_backend if name == configured else name,
    )
    # The configured model only applies to its own backend
    spec = settings.extractor_backend if backend == configured else backend
    try:
        _get_scanner(spec)
    except ValueError as exc:
        st.error(f"{exc}. Add the API key to your environment or .env and reload.")
        return

    _read_capture(spec)

    if st.session_state.scan_error:
        st.error(st.session_state.scan_error)
        return

    card = st.session_state.card
    if card is None:
        return

    with st.container(border=True):
        _render_card(card)
        if not st.session_state.editing:
            _render_actions(card, store, settings)
    _render_research(st.session_state.research)


if __name__ == "__main__":
    main()
