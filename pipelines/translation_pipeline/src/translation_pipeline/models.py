from __future__ import annotations

from dataclasses import dataclass

from interlinea_core.db.enums import TranslationProvider


class UnknownModelError(ValueError):
    pass


@dataclass(frozen=True)
class TranslationModel:
    id: int
    name: str
    provider: TranslationProvider


MODELS: tuple[TranslationModel, ...] = (
    TranslationModel(0, "gemini-2.5-flash", TranslationProvider.google),
    TranslationModel(1, "gemini-2.5-pro", TranslationProvider.google),
    TranslationModel(2, "gemini-2.5-flash-lite", TranslationProvider.google),
    TranslationModel(3, "gpt-5.2", TranslationProvider.openai),
    TranslationModel(4, "gpt-5-mini", TranslationProvider.openai),
    TranslationModel(5, "gpt-5-nano", TranslationProvider.openai),
)


def get_model(model_id: int) -> TranslationModel:
    for m in MODELS:
        if m.id == model_id:
            return m
    raise UnknownModelError(f"Unknown translation model id {model_id}; known ids: {[m.id for m in MODELS]}")
