"""
Streamlit console for the B2B pricing tool.

Features:
- Storefront price preview with "add N more to save" hint
- Tier table editor with validation before save
- Basket pricing with CSV export
- Quote request inbox with status updates
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from b2b_pricing.engine import PricingEngine, PriceTier, Request
from b2b_pricing.config.settings import get_settings
from b2b_pricing.services.tiers_service import TiersService, TierValidationError
from b2b_pricing.services.quotes_service import QuotesService, QuoteStatus, QuoteTransitionError, quote_total


st.set_page_config(
    page_title="B2B Pricing Console",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return PricingEngine()


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    return get_settings()


try:
    engine = get_engine()
    settings = get_settings_cached()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

tiers_service = TiersService(settings.tiers_csv, max_tiers=settings.max_tiers)
quotes_service = QuotesService(settings.quotes_json, page_size=settings.quotes_page_size)


# ============================================================================
# SIDEBAR: Product Selection
# ============================================================================
with st.sidebar:
    st.header("📦 Product")

    product_ids = engine.catalog.index.tolist()
    labels = [f"{pid} | {engine.catalog.loc[pid, 'name']}" for pid in product_ids]
    selected_option = st.selectbox("Product", options=labels, key="product_select")
    product_id = selected_option.split(" | ")[0] if selected_option else None

    if product_id:
        tiers = engine.get_tiers(product_id)
        default_price = engine.get_default_price(product_id)
        st.metric("Default Price", f"${default_price:,.2f}")
        if tiers:
            st.success(f"**{len(tiers)} tiers configured**")
        else:
            st.info("No tier table, default price applies")

    st.divider()
    if st.button("🔄 Reload Data", use_container_width=True):
        engine.reload_data()
        st.rerun()


st.title("B2B Pricing Console")
st.caption(f"v1.0 | {len(engine.catalog)} products | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["💲 Price Preview", "🧮 Tier Editor", "🛒 Basket", "📨 Quotes"])


# ============================================================================
# TAB 1: STOREFRONT PRICE PREVIEW
# ============================================================================
with tab1:
    if product_id:
        quantity = st.number_input("Quantity", min_value=1, value=1, step=1, key="preview_qty")
        price = engine.price_product(product_id, int(quantity))

        m1, m2, m3 = st.columns(3)
        m1.metric("Unit Price", f"${price.unit_price:,.2f}")
        m2.metric("Subtotal", f"${price.subtotal:,.2f}")
        m3.metric("From", f"${price.lowest_price:,.2f}")

        if price.tier_label:
            st.caption(f"**Band:** {price.tier_label}")

        if price.next_tier:
            hint = price.next_tier
            st.markdown(
                f":green[**Add {hint.quantity_needed} more to pay ${hint.next_price:,.2f} each "
                f"(save {hint.savings_percent}%)**]"
            )

        tiers = engine.get_tiers(product_id)
        if tiers:
            st.dataframe(pd.DataFrame([
                {'Band': t.label(), 'Unit Price': t.unit_price} for t in tiers
            ]), hide_index=True, use_container_width=True)


# ============================================================================
# TAB 2: TIER EDITOR
# ============================================================================
with tab2:
    if product_id:
        st.caption(f"Up to {settings.max_tiers} bands. Leave Max empty on the last band for no upper limit.")

        current = tiers_service.list_tiers(product_id)
        editor_df = pd.DataFrame([
            {'min_quantity': t.min_quantity, 'max_quantity': t.max_quantity, 'unit_price': t.unit_price}
            for t in current
        ], columns=['min_quantity', 'max_quantity', 'unit_price'])

        edited = st.data_editor(
            editor_df,
            num_rows="dynamic",
            use_container_width=True,
            key=f"tier_editor_{product_id}",
        )

        proposed = [
            PriceTier.from_dict({
                'min_quantity': row['min_quantity'],
                'max_quantity': None if pd.isna(row['max_quantity']) else row['max_quantity'],
                'unit_price': row['unit_price'],
            })
            for _, row in edited.dropna(subset=['min_quantity', 'unit_price']).iterrows()
        ]

        validation = tiers_service.validate(proposed)
        if not validation.valid:
            st.error(validation.reason)

        if st.button("💾 Save Tiers", type="primary", disabled=not validation.valid):
            try:
                tiers_service.replace_tiers(product_id, proposed)
                engine.reload_data()
                st.success("Tier table saved")
                st.rerun()
            except TierValidationError as e:
                st.error(e.reason)


# ============================================================================
# TAB 3: BASKET
# ============================================================================
with tab3:
    if 'basket' not in st.session_state:
        st.session_state.basket = {}

    c1, c2 = st.columns([1, 4])
    with c1:
        basket_qty = st.number_input("Qty", min_value=1, value=1, step=1, key="basket_qty")
    with c2:
        st.write("")
        st.write("")
        if st.button("➕ Add to Basket") and product_id:
            st.session_state.basket[product_id] = st.session_state.basket.get(product_id, 0) + int(basket_qty)
            st.rerun()

    if st.session_state.basket:
        result = engine.calculate(Request(items=st.session_state.basket))

        m1, m2 = st.columns(2)
        m1.metric("Total", f"${result.total:,.2f}")
        m2.metric("Units", result.total_quantity)

        for warning in result.warnings:
            st.warning(warning)

        export_df = pd.DataFrame([{
            'Product': line.product_id,
            'Name': line.name,
            'Quantity': line.quantity,
            'Unit Price': line.unit_price,
            'Ext Price': line.extended_price,
            'Source': line.source,
            'Band': line.tier_label or '',
        } for line in result.lines])
        st.dataframe(export_df, hide_index=True, use_container_width=True)

        for line in result.lines:
            with st.expander(f"🔍 {line.product_id} trace"):
                st.code(line.get_trace_text())

        b1, b2 = st.columns(2)
        with b1:
            st.download_button(
                "📥 CSV",
                data=export_df.to_csv(index=False),
                file_name="basket.csv",
                mime="text/csv",
                use_container_width=True
            )
        with b2:
            if st.button("🗑️ Clear", use_container_width=True):
                st.session_state.basket = {}
                st.rerun()
    else:
        st.info("🛒 Basket is empty")


# ============================================================================
# TAB 4: QUOTES
# ============================================================================
with tab4:
    f1, f2 = st.columns([2, 1])
    with f1:
        search = st.text_input("Search", placeholder="Quote number, name, email or company")
    with f2:
        status_filter = st.selectbox("Status", options=["ALL"] + [s.value for s in QuoteStatus])

    listing = quotes_service.list_quotes(
        search=search,
        status=None if status_filter == "ALL" else QuoteStatus(status_filter),
    )
    st.caption(f"{listing['pagination']['total']} quotes")

    for quote in listing['quotes']:
        with st.expander(f"{quote.quote_number} | {quote.name} | {quote.status.value}"):
            st.write(f"**Email:** {quote.email}  \n**Contact:** {quote.contact}")
            if quote.company_name:
                st.write(f"**Company:** {quote.company_name}")
            if quote.remark:
                st.caption(quote.remark)

            st.dataframe(pd.DataFrame([
                {'Product': i.product_id, 'Name': i.name, 'Qty': i.quantity, 'Price': i.price}
                for i in quote.items
            ]), hide_index=True, use_container_width=True)
            st.metric("Estimated Total", f"${quote_total(quote, engine):,.2f}")

            new_status = st.selectbox(
                "Update status",
                options=[s.value for s in QuoteStatus],
                index=[s.value for s in QuoteStatus].index(quote.status.value),
                key=f"status_{quote.id}",
            )
            if new_status != quote.status.value:
                try:
                    quotes_service.update_status(quote.id, QuoteStatus(new_status))
                    st.rerun()
                except QuoteTransitionError as e:
                    st.error(str(e))
