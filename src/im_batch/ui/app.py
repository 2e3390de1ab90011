"""
im-batch: Streamlit UI.

Web front-end for:
- Running an effect script over a folder of images (batchrun)
- Refreshing the local copies of the effect scripts (im-update-scripts)

Both run as subprocesses; their JSON summary line is shown here.
"""
from __future__ import annotations

import streamlit as st

from im_batch.ui.batch.helpers import BatchForm, summarize_result
from im_batch.ui.batch.runner import detect_other_execution, run_batch_with_form, run_update
from im_batch.ui.state import get_state, reset_state
from im_batch.utils.responses import OperationResult
from im_utils.settings import SETTINGS


def _render_result(result: OperationResult, label: str) -> None:
    summary = summarize_result(result)
    if summary["success"]:
        st.success(f"{label} finished")
    else:
        st.error(f"{label} failed: {summary['error']}")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Processed", summary["total"])
    c2.metric("OK", summary["success_count"])
    c3.metric("Failed", summary["failed_count"])
    c4.metric("Skipped", summary["skipped"])

    if summary["failures"]:
        st.subheader("Failures")
        st.dataframe(summary["failures"], use_container_width=True)
    if summary["items"]:
        with st.expander("All items"):
            st.dataframe(summary["items"], use_container_width=True)
    stderr_tail = result.metadata.get("stderr_tail")
    if stderr_tail:
        with st.expander("Log"):
            st.code(stderr_tail)


def render_batch_section() -> None:
    state = get_state()
    form = state.form

    st.header("Batch")
    other = detect_other_execution()
    if other:
        st.warning(f"Another batch is running (pid {other['pid']}, started {other['started']})")

    with st.form("batch_form"):
        command = st.text_input("Command", value=form.command,
                                help="Script and its own arguments, without the file names")
        col_in, col_out = st.columns(2)
        inputfolder = col_in.text_input("Input folder", value=form.inputfolder)
        outputfolder = col_out.text_input("Output folder", value=form.outputfolder,
                                          help="Default: the input folder")
        col_fmt, col_suf = st.columns(2)
        formats = col_fmt.text_input("Formats", value=form.formats, help='e.g. "jpg,png"; empty = every file')
        suffix = col_suf.text_input("Output suffix", value=form.suffix, help="Default: each file's own extension")
        path2imagemagick = st.text_input("ImageMagick folder", value=form.path2imagemagick)
        timeout = st.number_input("Timeout per image (s, 0 = none)", min_value=0.0, value=float(form.timeout))
        c1, c2 = st.columns(2)
        fail_fast = c1.checkbox("Stop at first failure", value=form.fail_fast)
        dry_run = c2.checkbox("Dry run", value=form.dry_run)
        submitted = st.form_submit_button("Run batch", disabled=bool(other))

    if submitted:
        state.form = BatchForm(
            command=command,
            inputfolder=inputfolder,
            outputfolder=outputfolder,
            formats=formats,
            suffix=suffix,
            path2imagemagick=path2imagemagick,
            timeout=float(timeout),
            fail_fast=fail_fast,
            dry_run=dry_run,
        )
        with st.spinner("Running..."):
            state.last_batch = run_batch_with_form(state.form)

    if state.last_batch is not None:
        _render_result(state.last_batch, "Batch")


def render_update_section() -> None:
    state = get_state()
    st.header("Update scripts")
    bin_dir = st.text_input("Bin folder", value=SETTINGS.updater.bin_dir)
    only = st.text_input("Only these scripts", value="", help="Comma or space separated; empty = all")
    if st.button("Download scripts"):
        with st.spinner("Downloading..."):
            state.last_update = run_update(bin_dir, only)
    if state.last_update is not None:
        _render_result(state.last_update, "Update")


def main() -> None:
    st.set_page_config(page_title="im-batch", layout="wide")
    st.title("im-batch")
    with st.sidebar:
        if st.button("Reset"):
            reset_state()
    tab_batch, tab_update = st.tabs(["Batch", "Update scripts"])
    with tab_batch:
        render_batch_section()
    with tab_update:
        render_update_section()


main()
