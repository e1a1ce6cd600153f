"""FastAPI server exposing closet and outfit endpoints."""

from dataclasses import asdict

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from stylist_app.app import StylistApp
from stylist_app.logging_config import configure_logging
from logic.errors import OutfitError
from logic.image_codec import from_data_url, to_data_url
from logic.validation import (
    ClosetUploadPayload,
    FaceImagePayload,
    OutfitRequestPayload,
    UserSessionPayload,
)
from models.closet_item import ClosetItem, UserProfile
from tools.closet_tools import ClosetUpdate, UnknownUserError


def _item_view(item: ClosetItem) -> dict:
    return {"id": item.id, "image": to_data_url(item.image), "mime_type": item.mime_type, "tags": list(item.tags)}


def _update_view(update: ClosetUpdate) -> dict:
    return {"items": [_item_view(item) for item in update.items], "persistence": asdict(update.persistence)}


def create_app(stylist: StylistApp | None = None) -> FastAPI:
    """Build the FastAPI instance; pass ``stylist`` to reuse an existing app."""

    configure_logging()
    stylist = stylist or StylistApp()
    closet = stylist.closet_tools
    app = FastAPI(title="Closet Stylist", version="0.1.0")
    app.state.stylist = stylist

    @app.exception_handler(OutfitError)
    async def _outfit_error(_, exc: OutfitError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.message, "kind": exc.kind, "state": exc.state},
        )

    @app.exception_handler(UnknownUserError)
    async def _unknown_user(_, exc: UnknownUserError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "No active session for this user."})

    @app.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "closet-stylist",
            "environment": stylist.config.environment or "local",
            "selection_model": stylist.config.selection_model,
            "composition_model": stylist.config.composition_model,
            "mock": stylist.config.use_mock_data,
        }

    @app.post("/users/{user_id}/session")
    def start_session(user_id: str, payload: UserSessionPayload) -> dict:
        """Record the signed-in user and load their saved photo and closet."""

        profile = UserProfile(user_id=user_id, **payload.model_dump())
        update = closet.load_user(profile)
        state = closet.state_for(user_id)
        return {
            **_update_view(update),
            "user_image": to_data_url(state.user_image) if state.user_image else None,
        }

    @app.delete("/users/{user_id}/session")
    def end_session(user_id: str) -> dict:
        closet.sign_out(user_id)
        return {"status": "signed_out"}

    @app.put("/users/{user_id}/face")
    def set_face(user_id: str, payload: FaceImagePayload) -> dict:
        update = closet.set_face_image(user_id, from_data_url(payload.image))
        return _update_view(update)

    @app.get("/users/{user_id}/closet")
    def list_closet(user_id: str) -> dict:
        state = closet.state_for(user_id)
        return {
            "items": [_item_view(item) for item in state.items],
            "selected_ids": sorted(state.selected_ids),
            "excluded_ids": sorted(state.excluded_ids),
        }

    @app.post("/users/{user_id}/closet")
    def add_closet_items(user_id: str, payload: ClosetUploadPayload) -> dict:
        images = [from_data_url(image) for image in payload.images]
        return _update_view(closet.add_encoded_items(user_id, images, payload.tags))

    @app.delete("/users/{user_id}/closet/{item_id}")
    def delete_closet_item(user_id: str, item_id: str) -> dict:
        update = closet.delete_item(user_id, item_id)
        if not update.items:
            raise HTTPException(status_code=404, detail=f"Unknown item {item_id}")
        return _update_view(update)

    @app.post("/users/{user_id}/closet/{item_id}/selection")
    def toggle_selection(user_id: str, item_id: str) -> dict:
        return {"item_id": item_id, "selected": closet.toggle_selection(user_id, item_id)}

    @app.post("/users/{user_id}/closet/{item_id}/exclusion")
    def toggle_exclusion(user_id: str, item_id: str) -> dict:
        return {"item_id": item_id, "excluded": closet.toggle_exclusion(user_id, item_id)}

    @app.post("/users/{user_id}/outfits")
    def suggest_outfit(user_id: str, payload: OutfitRequestPayload) -> dict:
        """Pick items for the purpose and return the rendered try-on image."""

        outfit = stylist.suggest_outfit(user_id, purpose=payload.purpose, mode=payload.mode)
        return {"image": outfit.image, "items": [_item_view(item) for item in outfit.items]}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:create_app", factory=True, host="0.0.0.0", port=8080, reload=False)
