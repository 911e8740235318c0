"""
FastAPI dependencies handing the app's state objects to routes.

Everything is built once in main.create_app() and hung off app.state;
HTTPConnection covers both HTTP requests and WebSockets.
"""

from fastapi.requests import HTTPConnection

from realtime.fanout import FanOutChannel
from services.song_requests import SongRequestService
from spotify.client import SpotifyCatalog
from store import SessionStore


def get_store(conn: HTTPConnection) -> SessionStore:
    return conn.app.state.store


def get_channel(conn: HTTPConnection) -> FanOutChannel:
    return conn.app.state.channel


def get_song_requests(conn: HTTPConnection) -> SongRequestService:
    return conn.app.state.song_requests


def get_catalog(conn: HTTPConnection) -> SpotifyCatalog:
    return conn.app.state.catalog
