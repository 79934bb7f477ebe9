import json
import logging

import gspread
import streamlit as st
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


# -----------------------------
# Google Sheets client (safe to cache)
# Both functions take plain strings so the cache key changes with the secrets
# -----------------------------
@st.cache_resource
def get_gsheets_client(credentials_json: str):
    credentials = Credentials.from_service_account_info(json.loads(credentials_json), scopes=SCOPES)
    return gspread.authorize(credentials)


@st.cache_resource
def get_spreadsheet(credentials_json: str, sheet_id: str):
    client = get_gsheets_client(credentials_json)
    logger.info("Opening spreadsheet %s", sheet_id)
    return client.open_by_key(sheet_id)
