"""Per-session wiring of identity, storage and stores."""

import logging
from typing import Optional

from tinydb import TinyDB
from tinydb.storages import Storage

from ..models.time_settings import TimeSettings
from ..providers.base import Dispatch
from ..providers.tinydb_provider import TinyDBCollectionProvider
from ..utils.config import Settings, get_settings
from .auth import AuthStore
from .journal_store import JournalSyncStore
from .queries import JournalQueries
from .time_settings import TimeSettingsStore

logger = logging.getLogger(__name__)


class AppContext:
    """
    Everything one application session needs, built once and passed around.

    Pass ``storage=MemoryStorage`` (a TinyDB storage class) to keep the
    database in memory.
    """
    
    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[type[Storage]] = None,
        dispatch: Optional[Dispatch] = None,
    ):
        self.settings = settings or get_settings()
        self.db = self._open_db(storage)
        
        self.auth = AuthStore(self.db, min_password_length=self.settings.min_password_length)
        self.provider = TinyDBCollectionProvider(self.db, dispatch=dispatch)
        self.journal = JournalSyncStore(self.auth, self.provider)
        self.queries = JournalQueries(self.auth, self.provider)
        self.time_settings = TimeSettingsStore(
            self.auth,
            self.provider,
            defaults=TimeSettings(
                morning_unlock=self.settings.morning_unlock,
                afternoon_unlock=self.settings.afternoon_unlock,
                evening_unlock=self.settings.evening_unlock,
            ),
        )
        self._started = False
    
    def _open_db(self, storage: Optional[type[Storage]]) -> TinyDB:
        if storage is not None:
            return TinyDB(storage=storage)
        self.settings.data_dir.mkdir(parents=True, exist_ok=True)
        return TinyDB(self.settings.database_path)
    
    def start(self) -> "AppContext":
        """Start the stores, then resolve the persisted session."""
        if self._started:
            return self
        self._started = True
        self.journal.init()
        self.time_settings.init()
        self.auth.restore()
        logger.debug("Session started")
        return self
    
    def close(self) -> None:
        """Tear down stores and close the database."""
        self.journal.destroy()
        self.time_settings.destroy()
        self.db.close()
        self._started = False
        logger.debug("Session closed")
    
    def __enter__(self) -> "AppContext":
        return self.start()
    
    def __exit__(self, *args) -> None:
        self.close()
