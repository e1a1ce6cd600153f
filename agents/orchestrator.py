"""Root orchestrator: selection then composition for one outfit request."""

from enum import Enum
import logging
from typing import Optional, Sequence

from stylist_app.logging_config import get_logger, log_event, operation_context
from agents.outfit_composer import OutfitComposerAgent
from agents.outfit_selector import OutfitSelectorAgent
from logic.eligibility import MIN_ELIGIBLE_ITEMS, eligible_items, parse_mode
from logic.errors import (
    InsufficientItemsError,
    MissingUserPhotoError,
    NoViableOutfitError,
    OutfitError,
)
from logic.image_codec import encode, to_data_url
from models.closet_item import ClosetItem, TransportImage
from models.outfit import GeneratedOutfit, SelectionMode, SelectionState


LOGGER = get_logger(__name__)

RESULT_MIME_TYPE = "image/png"


class OrchestrationState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


class OrchestratorAgent:
    """Sequences the selector and composer for a single outfit request.

    Nothing is kept between calls: each invocation derives the eligible items
    from the closet, mode and selection it is given. Callers are expected to
    avoid overlapping invocations and to apply their own deadline, since the
    underlying model calls have no timeout or retry here.
    """

    def __init__(self, selector: OutfitSelectorAgent, composer: OutfitComposerAgent) -> None:
        self.selector = selector
        self.composer = composer

    def suggest_outfit(
        self,
        user_photo: Optional[TransportImage],
        all_items: Sequence[ClosetItem],
        mode: SelectionMode | str,
        selection: SelectionState | None = None,
        purpose: str = "",
    ) -> GeneratedOutfit:
        """Pick items for ``purpose`` and render the user wearing them.

        Raises:
            OutfitError: One of its subclasses, with ``state`` set to where it failed.
        """

        selection = selection or SelectionState()
        with operation_context("agent:orchestrator.suggest_outfit") as correlation_id:
            state = OrchestrationState.IDLE
            try:
                if user_photo is None:
                    raise MissingUserPhotoError()

                mode = parse_mode(mode)
                candidates = eligible_items(all_items, mode, selection.selected_ids, selection.excluded_ids)
                log_event(
                    LOGGER,
                    logging.INFO,
                    "orchestrator_candidates",
                    mode=mode.value,
                    closet_count=len(all_items),
                    eligible_count=len(candidates),
                    correlation_id=correlation_id,
                )
                if len(candidates) < MIN_ELIGIBLE_ITEMS:
                    raise InsufficientItemsError()

                state = self._transition(state, OrchestrationState.SELECTING)
                selected = self.selector.select_items(candidates, purpose)
                if not selected:
                    raise NoViableOutfitError()

                state = self._transition(state, OrchestrationState.COMPOSING)
                image_bytes = self.composer.compose_image(user_photo, selected)

                state = self._transition(state, OrchestrationState.DONE)
                return GeneratedOutfit(
                    image=to_data_url(encode(image_bytes, RESULT_MIME_TYPE)),
                    items=list(selected),
                )
            except OutfitError as exc:
                exc.state = exc.state or state.value
                self._transition(state, OrchestrationState.FAILED, reason=exc.kind)
                raise

    @staticmethod
    def _transition(
        current: OrchestrationState, target: OrchestrationState, reason: str | None = None
    ) -> OrchestrationState:
        level = logging.WARNING if target is OrchestrationState.FAILED else logging.INFO
        log_event(
            LOGGER,
            level,
            "orchestrator_state",
            from_state=current.value,
            to_state=target.value,
            reason=reason,
        )
        return target


__all__ = ["OrchestrationState", "OrchestratorAgent", "RESULT_MIME_TYPE"]
