import logging

import pandas as pd
import streamlit as st

from ihcs_report.compositor import build_pages
from ihcs_report.config import PAGE_NUMBERING_MODES, RENDERERS
from ihcs_report.context import ReportContext
from ihcs_report.data_loader import connect_duckdb, fetch_company_tables, mounted_tables, resolve_data_path
from ihcs_report.pdf import generate_pdf, render_report_bytes, resolve_report_dir
from ihcs_report.report_queue import ReportQueue
from ihcs_report.report_store import save_report_pdf

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("ihcs_report.app")

st.set_page_config(page_title="IHCS Report Builder", layout="wide")


@st.cache_resource(show_spinner=False)
def get_connection(data_path: str):
    return connect_duckdb(data_path)


@st.cache_resource(show_spinner=False)
def get_queue() -> ReportQueue:
    return ReportQueue(max_workers=2)


def _page_overview(pages) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Page No.": page.page_number,
                "Section": page.section,
                "Template": page.template,
                "Orientation": page.orientation,
                "First line": next(iter(page.texts()), ""),
            }
            for page in pages
        ]
    )


def main() -> None:
    st.title("Internal Halal Control System (IHCS)")
    st.caption("Compile a company's IHCS documentation into the printable report.")

    st.sidebar.header("Source")
    data_path = st.sidebar.text_input("Table export folder", resolve_data_path())
    try:
        defaults = ReportContext.from_env("")
    except ValueError as exc:
        st.error(str(exc))
        return
    numbering = st.sidebar.selectbox(
        "Page numbering", PAGE_NUMBERING_MODES, index=PAGE_NUMBERING_MODES.index(defaults.numbering)
    )
    renderer = st.sidebar.selectbox("Renderer", RENDERERS, index=RENDERERS.index(defaults.renderer))

    if not data_path:
        st.error("Data path not configured. Set IHCS_DATA_PATH or place the table exports in ./data.")
        return
    try:
        conn = get_connection(data_path)
    except FileNotFoundError as exc:
        st.error(str(exc))
        return

    with st.sidebar.expander("Mounted tables", expanded=False):
        st.write(", ".join(mounted_tables(conn)) or "None")

    company_id = st.text_input("Company ID").strip()
    if not company_id:
        st.info("Enter a company ID to build its report.")
        return

    try:
        tables = fetch_company_tables(conn, company_id)
    except ValueError as exc:
        st.error(str(exc))
        return

    pages = build_pages(tables, numbering=numbering)
    st.subheader(f"{len(pages)} pages")
    st.dataframe(_page_overview(pages), width="stretch", hide_index=True)

    pdf_key = f"ihcs_pdf_{company_id}_{numbering}_{renderer}"
    if st.button("Generate PDF", type="primary"):
        ctx = ReportContext(company_id=company_id, numbering=numbering, renderer=renderer)
        with st.spinner("Rendering report..."):
            try:
                pdf_bytes = render_report_bytes(pages, renderer)
                path = save_report_pdf(ctx, pdf_bytes, page_count=len(pages), report_dir=resolve_report_dir())
                st.session_state[pdf_key] = pdf_bytes
                st.success(f"Report generated: {path.name}")
            except RuntimeError as e:
                logger.exception("Report rendering failed for %s", company_id)
                st.error(f"Report generation failed: {str(e)}")

    if isinstance(st.session_state.get(pdf_key), bytes):
        st.download_button(
            "Download PDF",
            st.session_state[pdf_key],
            f"IHCS_Report_{company_id}.pdf",
            "application/pdf",
        )

    st.divider()
    st.subheader("Background generation")
    queue = get_queue()
    if st.button("Queue report"):
        ctx = ReportContext(company_id=company_id, numbering=numbering, renderer=renderer)
        job_id = queue.submit(ctx, lambda job_ctx: generate_pdf(job_ctx, tables))
        st.info(f"Queued job {job_id}.")
    jobs = queue.for_company(company_id)
    if jobs:
        st.dataframe(
            pd.DataFrame(
                [
                    {"Job": job.id, "Status": job.status, "File": job.result_path or "", "Error": job.error or ""}
                    for job in jobs
                ]
            ),
            width="stretch",
            hide_index=True,
        )


main()
