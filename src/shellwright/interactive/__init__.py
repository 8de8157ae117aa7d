"""Interactive process sessions: supervised long-running children.

REPLs, dev servers and interactive CLIs run in managed sessions with
process group isolation, bounded output buffering, a hard cap on
concurrent sessions, and a periodic sweep of abandoned dead sessions.
"""

from shellwright.interactive.buffer import LineBuffer
from shellwright.interactive.manager import SessionManager, SessionOutput
from shellwright.interactive.reaper import Reaper
from shellwright.interactive.session import InteractiveSession, SessionInfo
from shellwright.interactive.store import SessionStore

__all__ = [
    "LineBuffer",
    "InteractiveSession",
    "SessionInfo",
    "SessionStore",
    "Reaper",
    "SessionManager",
    "SessionOutput",
]
