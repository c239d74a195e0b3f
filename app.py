import asyncio
from typing import List, Optional

import pandas as pd
import streamlit as st
import nest_asyncio

# Fix for Streamlit's asyncio loop
nest_asyncio.apply()

from productmeta.config import FetchSettings
from productmeta.pipeline import MetadataExtractor, extract_many

def _run(coro):
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)

def _normalise_urls(rows: List[Optional[str]]) -> List[str]:
    seen = set()
    out = []
    for r in rows:
        url = (r or "").strip()
        if not url or not url.lower().startswith(("http://", "https://")):
            continue
        if url.lower() in seen:
            continue
        seen.add(url.lower())
        out.append(url)
    return out

@st.cache_resource
def _get_extractor() -> MetadataExtractor:
    # One shared client for the session; httpx.Client is thread-safe
    return MetadataExtractor(FetchSettings.from_env())

def _format_price(price, currency: str) -> str:
    if price is None:
        return f"n/a {currency or ''}".strip()
    return f"{price:,.2f} {currency or ''}".strip()

def _render_preview(result: dict):
    if result.get("error"):
        st.warning(f"Could not read product details: {result['error']}. Fill the fields manually.")

    col1, col2 = st.columns([1, 2])
    with col1:
        if result.get("image_url"):
            st.image(result["image_url"], use_container_width=True)
        else:
            st.info("No image")
    with col2:
        st.subheader(result.get("title") or "Untitled product")
        st.metric("Price", _format_price(result.get("price"), result.get("currency")))
        if result.get("site_name"):
            st.caption(f"Source: {result['site_name']}")
        if result.get("description"):
            st.write(result["description"])
        if result.get("is_amazon"):
            st.caption(f"Amazon ASIN: {result.get('amazon_asin') or 'unknown'}")

def main():
    st.set_page_config(page_title="Product Metadata", layout="wide")

    st.markdown("""
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600&display=swap');

    html, body, [class*="css"]  {
        font-family: 'Inter', sans-serif;
    }
    h1 {
        font-weight: 700;
        letter-spacing: -0.02em;
        margin-bottom: 0.5rem;
    }
    .stButton>button {
        background: linear-gradient(135deg, #6366f1 0%, #4f46e5 100%);
        color: white;
        border-radius: 8px;
        border: none;
        padding: 0.6rem 1.2rem;
        font-weight: 600;
    }
    .block-container {
        padding-top: 2rem;
        max-width: 1200px;
    }
    </style>
    """, unsafe_allow_html=True)

    st.title("Product Metadata")
    st.markdown("### Pre-fill purchase requests from Amazon, MercadoLibre and other store links")

    with st.sidebar:
        mode = st.radio("Mode", ["Single URL", "Batch"])
        concurrency = st.number_input("Concurrency", 1, 16, 4)

    extractor = _get_extractor()

    if mode == "Single URL":
        url = st.text_input("Product URL", placeholder="https://www.amazon.com.mx/dp/B0BWK6PXZX")
        if st.button("Extract", use_container_width=True):
            if not url.strip():
                st.warning("Please enter a URL.")
                return
            with st.spinner("Reading product page..."):
                st.session_state['preview_result'] = extractor.preview(url.strip())

        if 'preview_result' in st.session_state:
            _render_preview(st.session_state['preview_result'])
        return

    tab1, tab2 = st.tabs(["Manual Input", "CSV Upload"])
    url_input = ""
    csv_file = None
    with tab1:
        url_input = st.text_area("Enter URLs (one per line)", height=150)
    with tab2:
        csv_file = st.file_uploader("Upload CSV (must have a 'url' column)", type=["csv"])

    if st.button("Extract All", use_container_width=True):
        raw_rows: List[Optional[str]] = []
        if csv_file:
            try:
                df_in = pd.read_csv(csv_file, dtype=str, keep_default_na=False)
            except Exception as e:
                st.error(f"Failed reading CSV: {e}")
                return
            col = next((c for c in df_in.columns if c.strip().lower() == "url"), None)
            if col is None:
                st.error("CSV has no 'url' column.")
                return
            raw_rows.extend(df_in[col].tolist())
        if url_input.strip():
            raw_rows.extend(url_input.splitlines())

        urls = _normalise_urls(raw_rows)
        if not urls:
            st.warning("Please provide at least one http(s) URL.")
            return

        with st.spinner(f"Extracting {len(urls)} URLs..."):
            st.session_state['batch_results'] = _run(
                extract_many(urls, concurrency=int(concurrency), extractor=extractor)
            )
        st.success(f"Completed! Processed {len(urls)} URLs.")

    if st.session_state.get('batch_results'):
        df = pd.DataFrame(st.session_state['batch_results'])
        preferred = ["url", "title", "price", "currency", "site_name", "image_url",
                     "description", "is_amazon", "amazon_asin", "error"]
        df = df[[c for c in preferred if c in df.columns]]
        st.dataframe(df, use_container_width=True)

        csv = df.to_csv(index=False).encode('utf-8')
        st.download_button(
            "Download CSV",
            csv,
            "product_metadata.csv",
            "text/csv",
            key='download-csv'
        )


if __name__ == "__main__":
    main()
