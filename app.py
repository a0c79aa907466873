"""Streamlit front-end for the statement ingestion pipeline."""
from __future__ import annotations

import pandas as pd
import streamlit as st

from statement_ingest import ProcessStatementUseCase, StatementProcessingContext, default_dispatcher
from statement_ingest.application.dto import ProcessFileRequest, ProcessFileResponse
from statement_ingest.config import SETTINGS
from statement_ingest.infrastructure.repositories.file_repository import FileSystemDataPointRepository
from statement_ingest.logging_setup import configure_logging
from statement_ingest.presentation.report import movements_to_dataframe, render_csv, render_html, render_xlsx

configure_logging()

st.set_page_config(page_title="Statement Ingestion", layout="wide")
st.title("Broker Statement Ingestion")


@st.cache_resource
def get_context() -> StatementProcessingContext:
    return StatementProcessingContext(
        repository=FileSystemDataPointRepository(SETTINGS.store_dir),
        dispatcher=default_dispatcher(),
    )


def run_processing(file_name: str, content: bytes, broker_key: str, content_type: str) -> ProcessFileResponse:
    use_case = ProcessStatementUseCase(get_context())
    return use_case.execute(
        ProcessFileRequest(
            file_name=file_name,
            content=content,
            size_bytes=len(content),
            broker_key=broker_key,
            content_type=content_type or "application/octet-stream",
        )
    )


if "result" not in st.session_state:
    st.session_state["result"] = None

dispatcher = get_context().dispatcher
col1, col2 = st.columns([3, 1])
with col1:
    upload = st.file_uploader(
        "Upload statement",
        type=[ext.lstrip(".") for ext in sorted(dispatcher.supported_extensions())],
    )
with col2:
    broker_key = st.selectbox("Broker", sorted(dispatcher.supported_brokers()))

run_btn = st.button("Process", disabled=upload is None)
if run_btn and upload is not None:
    with st.spinner("Processing..."):
        st.session_state["result"] = run_processing(upload.name, upload.read(), broker_key, upload.type)

response: ProcessFileResponse | None = st.session_state.get("result")
if response is None:
    st.info("Upload a statement and press Process.")
else:
    if response.is_success:
        st.success(f"{response.file_name}: {response.status}")
    else:
        st.error(f"{response.file_name}: {response.status}")
        for error in response.errors:
            st.write(f"- {error}")

    stats = response.statistics
    metrics = st.columns(4)
    metrics[0].metric("Movements", response.movement_count)
    metrics[1].metric("Warnings", len(response.warnings))
    metrics[2].metric("Ignored rows", stats.ignored_rows if stats else 0)
    metrics[3].metric("Elapsed (ms)", response.processing_time_ms)

    tabs = st.tabs(["Movements", "By category", "Warnings"])
    with tabs[0]:
        st.dataframe(movements_to_dataframe(response.movements))
        if response.movements:
            st.download_button(
                "Download CSV",
                data=render_csv(response.movements),
                file_name="movements.csv",
                mime="text/csv",
            )
            st.download_button(
                "Download Excel",
                data=render_xlsx(response.movements),
                file_name="movements.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
            st.download_button(
                "Download HTML",
                data=render_html(response.movements).encode("utf-8"),
                file_name="movements.html",
                mime="text/html",
            )
    with tabs[1]:
        if stats and stats.movements_by_category:
            st.bar_chart(pd.Series(stats.movements_by_category, name="movements"))
    with tabs[2]:
        for warning in response.warnings:
            st.write(f"- {warning}")
