"""
Gas Offer Comparator - Main Application

Streamlit page: upload contracts, extract offers with AI, edit them and rank
them by annual TTC budget.
"""

import pandas as pd
import streamlit as st

from config import DEFAULT_CONSUMPTION_MWH, DEFAULT_TVA_FIXE, DEFAULT_TVA_VAR
from config.logging_config import setup_logging
from domain.canonical import NUMERIC_FIELDS
from domain.errors import MissingCredentialError, UnauthenticatedError
from domain.upload import UploadedFile
from extraction import OfferExtractionPipeline, OpenAICompletion
from fields.pricing import comparison_frame, new_manual_offer, offers_from_frame, potential_savings, rank_offers
from storage import JsonOfferStore, StaticUserProvider

EDITABLE_COLUMNS = ["fournisseur", "typeContrat", *NUMERIC_FIELDS]
READ_ONLY_COLUMNS = ["sourceFile", "id"]

setup_logging()


def _euros(amount: float) -> str:
    return f"{amount:,.0f} €".replace(",", " ")


def _build_pipeline() -> OfferExtractionPipeline:
    return OfferExtractionPipeline(
        completion=OpenAICompletion(),
        store=JsonOfferStore(),
        user_provider=StaticUserProvider("local"),
    )


def _commit_offers(offers: list[dict]) -> None:
    """Replace the editor's base rows; a new editor key drops its pending edits."""
    st.session_state.offers = offers
    st.session_state.edited_offers = offers
    st.session_state.editor_version += 1


# ============================================================================
# PAGE CONFIG
# ============================================================================
st.set_page_config(
    page_title="Gas Offer Comparator",
    page_icon="🔥",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ============================================================================
# SESSION STATE INITIALIZATION
# ============================================================================
# offers: base rows fed to the editor; edited_offers: rows as last edited
if "offers" not in st.session_state:
    st.session_state.offers = []
if "edited_offers" not in st.session_state:
    st.session_state.edited_offers = []
if "editor_version" not in st.session_state:
    st.session_state.editor_version = 0
if "warnings" not in st.session_state:
    st.session_state.warnings = []

# ============================================================================
# UPLOAD + EXTRACTION
# ============================================================================
st.title("🔥 Gas Offer Comparator")

uploaded_files = st.file_uploader(
    "Upload contracts, broker tables or comparison tables",
    type=["pdf", "png", "jpg", "jpeg", "docx", "xlsx", "txt"],
    accept_multiple_files=True,
)

if uploaded_files and st.button("🤖 Extract offers", type="primary"):
    files = [UploadedFile(name=f.name, content=f.getvalue(), media_type=f.type) for f in uploaded_files]
    progress_bar = st.progress(0)
    status = st.empty()

    def on_progress(step):
        progress_bar.progress(min(int(step.progress), 100))
        status.write(step.step)

    try:
        result = _build_pipeline().process_and_store(files, on_progress=on_progress)
    except (MissingCredentialError, UnauthenticatedError) as e:
        st.error(f"❌ Error: {e}")
    else:
        _commit_offers(st.session_state.edited_offers + result.offers)
        st.session_state.warnings = result.warnings

for warning in st.session_state.warnings:
    st.warning(warning)

# ============================================================================
# EDITABLE OFFERS
# ============================================================================
col_add, col_reset = st.columns(2)
if col_add.button("➕ Add offer"):
    _commit_offers(st.session_state.edited_offers + [new_manual_offer()])
if col_reset.button("🔄 Reset"):
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    st.rerun()

if st.session_state.offers:
    offers_df = pd.DataFrame(st.session_state.offers, columns=EDITABLE_COLUMNS + READ_ONLY_COLUMNS)
    edited_df = st.data_editor(
        offers_df,
        num_rows="dynamic",
        disabled=READ_ONLY_COLUMNS,
        width="stretch",
        key=f"offers_editor_{st.session_state.editor_version}",
    )
    offers = offers_from_frame(edited_df)
    st.session_state.edited_offers = offers

    # ========================================================================
    # RANKING
    # ========================================================================
    c1, c2, c3, c4 = st.columns(4)
    consumption = c1.number_input("Consumption (MWh/year)", min_value=0.0, value=float(DEFAULT_CONSUMPTION_MWH))
    tva_fixe = c2.number_input("VAT on fixed costs", min_value=0.0, value=DEFAULT_TVA_FIXE, format="%.3f")
    tva_var = c3.number_input("VAT on variable costs", min_value=0.0, value=DEFAULT_TVA_VAR, format="%.3f")
    query = c4.text_input("Search")

    ranked = rank_offers(offers, consumption, tva_fixe, tva_var, query=query)
    if ranked:
        best = ranked[0]
        st.success(
            f"🥇 Best offer: {best['fournisseur']} - {best['typeContrat']} "
            f"({_euros(best['ttc'])} TTC/year). Potential savings: {_euros(potential_savings(ranked))}"
        )
        frame = comparison_frame(ranked)
        st.dataframe(frame, width="stretch", hide_index=True)
        st.bar_chart(frame.set_index("Supplier")["TTC (€)"])
