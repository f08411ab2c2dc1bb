"""
Streamlit entry point — Product Import Review UI.

Wires the import pipeline into a short user flow:
  1. Sidebar settings (analysis mode, validation mode)
  2. File upload (xlsx or csv/tsv/txt)
  3. Parse + quality check
  4. Results display (metrics, detection metadata, column guesses,
     products, errors, quality summary)
  5. Download the review workbook

Contains NO business logic — only calls processing modules and displays results.
"""

import io
import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from processing.pipeline import parse_products_file
from processing.quality_checker import check_import_quality
from utils.excel_formatter import export_review_workbook, results_to_dataframe

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Page configuration
# ═══════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Product Import Review",
    page_icon="💊",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ═══════════════════════════════════════════════════════════════════════════
# Sidebar — Settings
# ═══════════════════════════════════════════════════════════════════════════

st.sidebar.title("⚙️ Settings")

analysis_mode = st.sidebar.radio(
    "Analysis mode",
    options=["fast", "deep"],
    help="Size of the diagnostic sample (fast ≤ 32 rows, deep 64–256). Parsed rows are the same in both.",
)

validation_mode = st.sidebar.radio(
    "Validation mode",
    options=["full", "errorsOnly", "none"],
    help="'none' still cleans every row but reports no problems.",
)


# ═══════════════════════════════════════════════════════════════════════════
# Main area — Title + upload
# ═══════════════════════════════════════════════════════════════════════════

st.title("💊 Product Import Review")
st.caption("Upload a product master or inventory export to preview the canonical products and row-level problems.")

uploaded_file = st.file_uploader(
    "Products file",
    type=["xlsx", "csv", "tsv", "txt"],
    accept_multiple_files=False,
    help="Template workbooks, legacy item exports, or any delimited text file.",
)

if uploaded_file is None:
    st.stop()


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Parse + quality check
# ═══════════════════════════════════════════════════════════════════════════

with st.spinner(f"Parsing {uploaded_file.name}..."):
    try:
        result = parse_products_file(
            io.BytesIO(uploaded_file.getvalue()),
            uploaded_file.name,
            mode=analysis_mode,
            validation_mode=validation_mode,
        )
        quality = check_import_quality(result)
    except Exception as exc:
        error_msg = f"Error processing {uploaded_file.name}: {exc}"
        logger.error(error_msg, exc_info=True)
        st.error(error_msg)
        st.stop()

meta = result.meta

if meta.read_errors:
    with st.expander(f"⚠️ Read errors ({len(meta.read_errors)})", expanded=True):
        for message in meta.read_errors:
            st.text(message)


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Summary
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("📊 Import Summary")

metric_cols = st.columns(4)
with metric_cols[0]:
    st.metric("Total Rows", meta.total_rows)
with metric_cols[1]:
    st.metric("Parsed Rows", meta.parsed_rows)
with metric_cols[2]:
    st.metric("Errors", f"{quality.blocking_count} (+{quality.warning_count} warnings)")
with metric_cols[3]:
    st.metric("Schema", meta.source_schema or "—")

if quality.is_clean:
    st.success("✅ No blocking errors.")
else:
    st.warning(
        f"⚠️ {quality.blocked_rows} row(s) have blocking errors. "
        "Review the Errors sheet in the downloaded workbook."
    )

with st.expander("Detection metadata"):
    st.json(result.to_dict()["meta"])

if meta.header_mode == "none" and meta.column_guesses:
    st.subheader("Column guesses (no header row)")
    guess_rows = [
        {
            "Column": guess["index"] + 1,
            "Best guess": guess["candidates"][0]["field"] if guess["candidates"] else "",
            "Confidence": guess["candidates"][0]["confidence"] if guess["candidates"] else 0.0,
            "Samples": ", ".join(guess["sample_values"][:3]),
        }
        for guess in meta.column_guesses
    ]
    st.dataframe(pd.DataFrame(guess_rows), use_container_width=True, hide_index=True)


# ═══════════════════════════════════════════════════════════════════════════
# Section 3: Products + errors
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("📋 Products")

products_df = results_to_dataframe(result)
preview_row_limit = 200
if len(products_df) > preview_row_limit:
    st.caption(
        f"Showing first {preview_row_limit} of {len(products_df)} rows. "
        "Download the workbook for the full dataset."
    )
st.dataframe(products_df.head(preview_row_limit), use_container_width=True, hide_index=True)

st.header("⚠️ Errors")
if result.errors:
    errors_df = pd.DataFrame(
        [
            {"Row": e.row, "Field": e.field, "Code": e.code, "Message": e.message}
            for e in result.errors
        ]
    )
    st.dataframe(errors_df, use_container_width=True, hide_index=True)
else:
    st.info("No row-level problems reported.")

with st.expander("Quality details"):
    st.subheader("Errors by code")
    st.dataframe(
        pd.DataFrame(
            {"Code": list(quality.counts_by_code.keys()), "Count": list(quality.counts_by_code.values())}
        ),
        use_container_width=True,
        hide_index=True,
    )
    st.subheader("NA rate by field")
    st.dataframe(
        pd.DataFrame(
            {"Field": list(quality.na_rates.keys()), "NA %": [f"{v}%" for v in quality.na_rates.values()]}
        ),
        use_container_width=True,
        hide_index=True,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Section 4: Download
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("💾 Download")

with st.spinner("Generating review workbook..."):
    buffer = io.BytesIO()
    export_review_workbook(result, buffer, quality=quality)

timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
st.download_button(
    label="📥 Download Review Workbook",
    data=buffer.getvalue(),
    file_name=f"product_import_review_{timestamp}.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    type="primary",
    use_container_width=True,
)

st.caption(
    f"Workbook contains {len(products_df)} product rows across 3 sheets: "
    "Products, Errors, Import Summary."
)
