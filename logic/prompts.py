"""Prompt text for the selection and composition model calls."""

from __future__ import annotations

from typing import List, Sequence

from models.closet_item import ClosetItem

SELECTION_HEADER = (
    "You will be shown a set of clothing items as images. Each image is preceded by a text "
    "line that includes an 'id' and maybe some 'tags' for that item. You may also be given "
    "the purpose the outfit is for, like a wedding or a casual day; always keep it in mind. "
    "If no purpose is given, suggest the best outfit overall. Select a coherent outfit by "
    "choosing one top, one bottom, and one pair of shoes if available. Respond ONLY with "
    "JSON following the provided schema."
)

COMPOSITION_RULES: List[str] = [
    "Replace ALL of the clothing the person is currently wearing with exactly the provided items.",
    "Preserve the person's identity exactly: face, hair, body shape, skin tone, pose and expression.",
    "Keep the original background and lighting unchanged.",
    "Keep the colors, patterns and textures of every provided item exactly as shown.",
    "Show the full body from head to toe.",
    "The result must be photorealistic. Do not add garments or accessories that were not provided.",
    "Return only the edited image, with no text.",
]


def item_meta_line(item: ClosetItem) -> str:
    return f"ITEM_META id: {item.id} | tags: {item.describe()}"


def selection_instruction(purpose: str) -> str:
    """Instruction block for the item selection call with the purpose embedded verbatim."""

    if purpose:
        return f'{SELECTION_HEADER}\nPurpose: "{purpose}".'
    return SELECTION_HEADER


def composition_instruction(items: Sequence[ClosetItem]) -> str:
    """Instruction prompt for the try-on image call."""

    described = [item.describe() for item in items if item.tags]
    outfit_text = " and ".join(described) if described else f"the {len(items)} provided clothing items"
    rules = "\n".join(f"- {rule}" for rule in COMPOSITION_RULES)
    return (
        "Virtually try on these clothes. The first image is the person and the following "
        f"images are the clothing items. Edit the first image so the person wears a complete "
        f"outfit composed of: {outfit_text}.\n"
        "CRITICAL INSTRUCTIONS:\n"
        f"{rules}"
    )


__all__ = [
    "SELECTION_HEADER",
    "COMPOSITION_RULES",
    "item_meta_line",
    "selection_instruction",
    "composition_instruction",
]
