"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .config import Settings, resolve_db_path
from .dispatcher import EventDispatcher
from .llm import ChatResponder, IChatResponder, LLMProvider, UnavailableResponder
from .logging_config import get_logger
from .messaging import ILineClient, LineClient
from .storage import IStorage, StateStore, Storage
from .tracker import Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    settings: Settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    @property
    def dispatcher(self) -> EventDispatcher: ...

    @property
    def line_client(self) -> ILineClient: ...

    @property
    def tracker(self) -> Tracker: ...

    @property
    def storage(self) -> IStorage: ...


class Application:
    """Main application bootstrap.

    Components can be injected for tests; anything not injected is built
    from settings in start().
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_path: str | None = None,
        storage: IStorage | None = None,
        responder: IChatResponder | None = None,
        line_client: ILineClient | None = None,
    ):
        self.settings = settings or Settings.from_env()
        env_db_path = self.settings.database_url if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        self._storage: IStorage | None = storage
        self._owns_storage = storage is None
        self._responder: IChatResponder | None = responder
        self._line_client: ILineClient | None = line_client
        self._llm: LLMProvider | None = None
        self._tracker: Tracker | None = None
        self._dispatcher: EventDispatcher | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        if self._storage is None:
            self._storage = Storage(self._db_path)
        if self._owns_storage:
            await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. AI responder (no internal dependencies)
        if self._responder is None:
            self._responder = self._build_responder()

        # 4. LINE client
        if self._line_client is None:
            self._line_client = LineClient(
                self.settings.line_channel_access_token,
                base_url=self.settings.line_api_base_url,
            )

        # 5. Dispatcher (depends on Storage, responder, Tracker)
        self._dispatcher = EventDispatcher(
            state_store=StateStore(self._storage),
            responder=self._responder,
            tracker=self._tracker,
            serialize_users=self.settings.serialize_user_events,
            consultation_url=self.settings.consultation_url,
        )
        logger.info("All components initialized successfully")

    def _build_responder(self) -> IChatResponder:
        try:
            self._llm = LLMProvider(
                api_key=self.settings.anthropic_api_key,
                model=self.settings.anthropic_model,
            )
        except ValueError as e:
            logger.warning(f"AI chat disabled: {e}")
            return UnavailableResponder(str(e))
        logger.info("LLM provider initialized")
        return ChatResponder(self._llm)

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if isinstance(self._line_client, LineClient):
            await self._line_client.aclose()
        if self._llm:
            await self._llm.close()
        if self._storage and self._owns_storage:
            await self._storage.close()
            logger.info("Storage closed")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def dispatcher(self) -> EventDispatcher:
        """Get event dispatcher instance."""
        if not self._dispatcher:
            raise RuntimeError("Application not started")
        return self._dispatcher

    @property
    def line_client(self) -> ILineClient:
        """Get LINE client instance."""
        if not self._line_client:
            raise RuntimeError("Application not started")
        return self._line_client

    @property
    def tracker(self) -> Tracker:
        """Get tracker instance."""
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker
