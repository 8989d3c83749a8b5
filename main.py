"""
Huvudapplikation för Streamlit ruttplanerare
"""

import streamlit as st
from streamlit_folium import st_folium
from datetime import datetime

# Importera moduler
import logging_config
from auth import AuthService, FirebaseIdentityProvider
from config import load_settings, REQUEST_TIMEOUT, MAX_ROUTE_ATTEMPTS
from geocoding import geocode_address
from location import StaticLocationProvider
from map_utils import MapCanvas, create_map
from models import Coordinate
from planner import IncompleteSelection, RoutePlanner
from routing import RouteFetcher
from routing_providers import HttpRoutingProvider
from utils import calculate_route_distance, create_gpx, normalize_longitude

MESSAGE_FUNCTIONS = {
    "info": st.info,
    "success": st.success,
    "warning": st.warning,
    "error": st.error,
}


def read_secrets() -> dict:
    """st.secrets som dict; tom om ingen secrets.toml finns"""
    try:
        return dict(st.secrets)
    except FileNotFoundError:
        return {}


def init_session_state():
    """Initiera session state"""
    if "settings" not in st.session_state:
        st.session_state.settings = load_settings(read_secrets())
        logging_config.configure(st.session_state.settings.log_level)
    if "user_id" not in st.session_state:
        st.session_state.user_id = None
    if "auth_page" not in st.session_state:
        st.session_state.auth_page = "login"
    if "last_click" not in st.session_state:
        st.session_state.last_click = None
    if "last_address" not in st.session_state:
        st.session_state.last_address = ""
    if "planner" not in st.session_state:
        settings = st.session_state.settings
        canvas = MapCanvas()
        provider = HttpRoutingProvider(
            base_url=settings.routing_base_url,
            timeout=REQUEST_TIMEOUT,
            max_attempts=MAX_ROUTE_ATTEMPTS
        )
        planner = RoutePlanner(
            canvas,
            RouteFetcher(provider),
            StaticLocationProvider(settings.home_location)
        )
        planner.create(location_permission_granted=False)
        st.session_state.canvas = canvas
        st.session_state.planner = planner


def get_auth_service() -> AuthService:
    settings = st.session_state.settings
    return AuthService(FirebaseIdentityProvider(settings.firebase_api_key))


def clicked_coordinate(clicked: dict) -> Coordinate:
    """Kartklick från st_folium som Coordinate, med longituden invikt"""
    return Coordinate(clicked["lat"], normalize_longitude(clicked["lng"]))


def await_route(planner: RoutePlanner, canvas: MapCanvas, spinner=st.spinner):
    """Visa laddningsindikatorn så länge planeraren är upptagen"""
    if canvas.busy:
        with spinner("Hämtar rutt..."):
            planner.wait_for_route()


def show_messages(canvas: MapCanvas):
    for level, message in canvas.pop_messages():
        MESSAGE_FUNCTIONS.get(level, st.info)(message)


def auth_page():
    """Inloggning och registrering"""
    if not st.session_state.settings.firebase_api_key:
        st.error("FIREBASE_API_KEY saknas i secrets. Inloggning är inte möjlig.")
        return

    if st.session_state.auth_page == "login":
        st.subheader("Logga in")
        with st.form("login_form", clear_on_submit=True):
            email = st.text_input("E-post")
            password = st.text_input("Lösenord", type="password")
            submitted = st.form_submit_button("Logga in", type="primary")

        if submitted:
            result = get_auth_service().login(email, password)
            if result.success:
                st.session_state.user_id = result.user_id
                st.toast(result.message)
                st.rerun()
            else:
                st.error(result.message)

        if st.button("Inget konto? Registrera dig"):
            st.session_state.auth_page = "register"
            st.rerun()
    else:
        st.subheader("Registrera")
        with st.form("register_form", clear_on_submit=True):
            email = st.text_input("E-post")
            password = st.text_input("Lösenord", type="password")
            confirm_password = st.text_input("Bekräfta lösenord", type="password")
            submitted = st.form_submit_button("Registrera", type="primary")

        if submitted:
            result = get_auth_service().register(email, password, confirm_password)
            if result.success:
                st.session_state.auth_page = "login"
                st.success(result.message)
            else:
                st.error(result.message)

        if st.button("Har du redan ett konto? Logga in"):
            st.session_state.auth_page = "login"
            st.rerun()


def map_page():
    """Karta med start- och slutpunkt och vägbeskrivning"""
    planner: RoutePlanner = st.session_state.planner
    canvas: MapCanvas = st.session_state.canvas

    with st.sidebar:
        st.header("Rutt")

        # Plats
        if canvas.permission_requested:
            use_location = st.checkbox("Använd min position", key="use_location")
            if use_location != st.session_state.get("location_answered", False):
                st.session_state.location_answered = use_location
                planner.on_permission_result(use_location)

        st.divider()

        # Adress som alternativ till kartklick
        address = st.text_input(
            "Sök adress",
            placeholder="T.ex. Kungsgatan 1, Stockholm",
            key="address"
        )
        if address and address != st.session_state.last_address:
            with st.spinner("Söker adress..."):
                coords = geocode_address(address)
            st.session_state.last_address = address
            if coords:
                planner.select_point(coords)
            else:
                st.error("Kunde inte hitta adressen")

        start, end = planner.start, planner.end
        st.text(f"Start: {start.coordinate.as_query() if start else '-'}")
        st.text(f"Mål: {end.coordinate.as_query() if end else '-'}")

        if st.button("Hämta vägbeskrivning", type="primary", use_container_width=True):
            try:
                planner.request_route()
            except IncompleteSelection as e:
                st.warning(e.message)
            else:
                await_route(planner, canvas)

        if st.button("Logga ut", use_container_width=True):
            planner.dispose()
            for key in ("planner", "canvas", "user_id", "last_click", "location_answered"):
                st.session_state.pop(key, None)
            st.rerun()

    show_messages(canvas)

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("Karta")
        st.caption("Klicka på kartan för att välja start och mål")

        map_data = st_folium(
            create_map(canvas),
            key="map",
            width=None,
            height=500,
            returned_objects=["last_clicked"]
        )

        # Varje klick ska bara räknas en gång över omritningar
        clicked = map_data.get("last_clicked") if map_data else None
        if clicked and clicked != st.session_state.last_click:
            st.session_state.last_click = clicked
            planner.select_point(clicked_coordinate(clicked))
            st.rerun()

    with col2:
        st.subheader("Sammanfattning")

        route = planner.route
        if route:
            st.metric("Distans", f"{calculate_route_distance(route)/1000:.2f} km")
            st.metric("Punkter", len(route.points))

            st.divider()

            st.subheader("Export")
            gpx_name = st.text_input(
                "Ruttnamn",
                value=f"Rutt {datetime.now().strftime('%Y-%m-%d')}",
                key="gpx_name"
            )
            st.download_button(
                label="Ladda ner GPX",
                data=create_gpx(route, gpx_name),
                file_name=f"{gpx_name.replace(' ', '_')}.gpx",
                mime="application/gpx+xml",
                use_container_width=True
            )
        else:
            st.info("Välj två punkter och hämta vägbeskrivning för att se rutten")


def main():
    """Huvudfunktion för Streamlit-appen"""
    st.set_page_config(
        page_title="Ruttplanerare",
        page_icon="🗺️",
        layout="wide"
    )

    init_session_state()

    st.title("Ruttplanerare")

    if st.session_state.user_id is None:
        auth_page()
    else:
        map_page()


if __name__ == "__main__":
    main()
