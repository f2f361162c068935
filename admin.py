import streamlit as st
import pandas as pd

from app.core.errors import BookingError
from app.services.booking_service import booking_service

# Page Config
st.set_page_config(
    page_title="Bookings Admin",
    page_icon="📅",
    layout="centered"
)

# Header
st.title("Appointment Bookings - Admin Panel")

def load_data():
    try:
        bookings = booking_service.list()
    except BookingError as e:
        st.error(f"Cannot read bookings: {e.detail}")
        return None
    if not bookings:
        return pd.DataFrame()
    # Newest first
    return pd.DataFrame(bookings).sort_values("id", ascending=False)

# Load Data
if st.button("Refresh"):
    st.rerun()

df = load_data()

if df is not None and not df.empty:
    # Metrics
    total_bookings = len(df)
    unique_services = df['service'].nunique() if 'service' in df.columns else 0

    col1, col2 = st.columns(2)
    col1.metric("Total bookings", total_bookings)
    col2.metric("Service types", unique_services)

    # Data Table
    st.subheader("Bookings")
    st.dataframe(
        df,
        use_container_width=True,
        column_config={
            "timestamp": st.column_config.TextColumn("Created"),
            "id": st.column_config.NumberColumn("ID", format="%d"),
        }
    )

    # Delete
    st.subheader("Delete a booking")
    selected = st.selectbox("Booking ID", df["id"].tolist())
    if st.button("Delete"):
        try:
            booking_service.delete(int(selected))
            st.success(f"Booking {selected} deleted.")
            st.rerun()
        except BookingError as e:
            st.error(e.detail)
else:
    st.info("No bookings yet.")

# Footer
st.markdown("---")
st.caption("Appointment Booking Backend")
