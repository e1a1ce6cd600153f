"""Closet Stylist app bootstrap."""

import logging
from typing import Any, Callable, Optional

from google import genai
from google.genai import types

from stylist_app.config import AppConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from agents.orchestrator import OrchestratorAgent
from agents.outfit_composer import OutfitComposerAgent
from agents.outfit_selector import OutfitSelectorAgent
from logic.eligibility import parse_mode
from logic.errors import OutfitError
from memory.generation_log import GenerationLogStore
from models.outfit import GeneratedOutfit, SelectionMode
from tools.closet_store import ClosetRepository, SQLiteClosetRepository
from tools.closet_tools import ClosetTools
from tools.mock_backend import MockGenAIClient


LOGGER = get_logger(__name__)


class StylistApp:
    """Wires together the Gemini client, agents, closet tools and telemetry."""

    def __init__(
        self,
        config: AppConfig | None = None,
        client: Any = None,
        repository: ClosetRepository | None = None,
        generation_logs: GenerationLogStore | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        self.client = client or self._build_client()
        self.repository = repository or SQLiteClosetRepository(self.config.closet_db_path)
        self.closet_tools = ClosetTools(self.repository, encode_workers=self.config.encode_workers)
        self.generation_logs = generation_logs or GenerationLogStore(self.config.generation_log_dir)

        self.selector = OutfitSelectorAgent(self.client, self.config.selection_model)
        self.composer = OutfitComposerAgent(self.client, self.config.composition_model)
        self.orchestrator = OrchestratorAgent(selector=self.selector, composer=self.composer)

    def _build_client(self) -> Any:
        if self.config.use_mock_data:
            LOGGER.warning("Using the mock generative backend; outfits will not be real.")
            return MockGenAIClient()
        if not self.config.api_key:
            raise RuntimeError(
                "GEMINI_API_KEY is not set. Configure your API key or set USE_MOCK_DATA=true."
            )
        http_options = None
        if self.config.request_timeout_ms:
            http_options = types.HttpOptions(timeout=self.config.request_timeout_ms)
        return genai.Client(api_key=self.config.api_key, http_options=http_options)

    def suggest_outfit(
        self,
        user_id: str,
        purpose: str = "",
        mode: SelectionMode | str = SelectionMode.FULL,
    ) -> GeneratedOutfit:
        """Run one outfit request against the user's current closet state.

        Generation logs and counters are written around the request; a failed
        telemetry write is logged and does not affect the result.
        """

        state = self.closet_tools.state_for(user_id)
        mode = parse_mode(mode)
        with operation_context("app:suggest_outfit") as correlation_id:
            log_event(
                LOGGER,
                logging.INFO,
                "app_call_started",
                method="suggest_outfit",
                has_user_image=state.user_image is not None,
                closet_count=len(state.items),
                mode=mode.value,
                selected_count=len(state.selected_ids),
                excluded_count=len(state.excluded_ids),
                purpose=purpose,
                correlation_id=correlation_id,
            )
            log_id = self._record(
                self.generation_logs.create_log,
                user_id,
                {"mode": mode.value, "purpose": purpose, "correlation_id": correlation_id},
            )
            self._record(self.generation_logs.increment_counters, user_id, 1)

            try:
                outfit = self.orchestrator.suggest_outfit(
                    state.user_image,
                    list(state.items),
                    mode,
                    state.selection(),
                    purpose,
                )
            except OutfitError as exc:
                if log_id:
                    self._record(
                        self.generation_logs.update_log,
                        user_id,
                        log_id,
                        {"status": "error", "error_kind": exc.kind, "error_message": exc.message, "failed_state": exc.state},
                    )
                self._record(self.generation_logs.increment_counters, user_id, 0, 0, 1)
                raise

            if log_id:
                self._record(
                    self.generation_logs.update_log,
                    user_id,
                    log_id,
                    {"status": "success", "item_ids": outfit.item_ids},
                )
            self._record(self.generation_logs.increment_counters, user_id, 0, 1, 0)
            log_event(
                LOGGER,
                logging.INFO,
                "app_call_completed",
                method="suggest_outfit",
                item_ids=outfit.item_ids,
                correlation_id=correlation_id,
            )
            return outfit

    @staticmethod
    def _record(func: Callable[..., Any], *args: Any) -> Optional[Any]:
        try:
            return func(*args)
        except Exception as exc:  # noqa: BLE001
            log_event(LOGGER, logging.WARNING, "telemetry_write_failed", operation=func.__name__, error=str(exc))
            return None


__all__ = ["StylistApp"]
