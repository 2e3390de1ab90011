"""
State management for the im-batch UI.

Holds the batch form and the last results in the Streamlit session.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import streamlit as st

from im_batch.ui.batch.helpers import BatchForm
from im_batch.utils.responses import OperationResult


@dataclass
class UIState:
    """Per-session state of the batch page."""
    form: BatchForm = field(default_factory=BatchForm)
    last_batch: OperationResult | None = None
    last_update: OperationResult | None = None


def ensure_state() -> None:
    """Ensure the UI state exists in the session."""
    if "im_batch" not in st.session_state:
        st.session_state.im_batch = UIState()


def get_state() -> UIState:
    ensure_state()
    return st.session_state.im_batch


def reset_state() -> None:
    st.session_state.im_batch = UIState()
