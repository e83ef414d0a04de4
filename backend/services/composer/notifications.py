"""Localized toast notifications emitted by the composer."""
from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

from backend.services.composer.types import Language, Notification, NotificationType

NOTIFICATION_TTL_SEC = 3.0

MESSAGES: Dict[str, Dict[str, str]] = {
    "reset_to_tags":       {"en": "Reset to selected tags", "ua": "Скинуто до обраних тегів"},
    "category_cleared":    {"en": "Category cleared", "ua": "Категорію очищено"},
    "nothing_selected":    {"en": "Nothing selected", "ua": "Нічого не вибрано"},
    "preset_applied":      {"en": "Applied preset: {name}", "ua": "Застосовано пресет: {name}"},
    "cleared_all":         {"en": "Cleared all selections", "ua": "Все очищено"},
    "nothing_to_clear":    {"en": "Nothing to clear", "ua": "Нічого очищати"},
    "face_added":          {"en": "Face features added successfully", "ua": "Риси обличчя успішно додано"},
    "face_failed":         {"en": "Face analysis failed", "ua": "Помилка аналізу обличчя"},
    "style_added":         {"en": "Style successfully extracted", "ua": "Стиль успішно визначено"},
    "style_failed":        {"en": "Style analysis failed", "ua": "Помилка аналізу стилю"},
    "prompt_enhanced":     {"en": "Prompt enhanced with AI", "ua": "Промт покращено через AI"},
    "generation_failed":   {"en": "Generation failed", "ua": "Помилка генерації"},
    "nothing_to_enhance":  {
        "en": "Please select some tags or write something first.",
        "ua": "Будь ласка, спочатку оберіть кілька тегів або напишіть щось.",
    },
    "suggestions_added":   {"en": "Added {count} suggestions", "ua": "Додано {count} ідей"},
    "no_suggestions":      {"en": "AI found no new suggestions", "ua": "AI не знайшов нових ідей"},
    "suggestions_failed":  {"en": "Failed to get suggestions", "ua": "Помилка отримання ідей"},
    "prompt_required":     {"en": "Generate a prompt first", "ua": "Спочатку згенеруйте промт"},
    "video_failed":        {"en": "Video generation failed", "ua": "Помилка генерації відео"},
    "key_selected":        {"en": "Key selected. Try again.", "ua": "Ключ обрано. Спробуйте ще раз."},
    "auto_duration":       {
        "en": "Auto-duration set: {seconds}s ({reason})",
        "ua": "Тривалість авто-змінено: {seconds}с ({reason})",
    },
    "reason_timelapse":    {"en": "Timelapse", "ua": "Таймлапс"},
    "reason_slow_motion":  {"en": "Slow Motion", "ua": "Сповільнення"},
    "reason_complex_move": {"en": "Complex Move", "ua": "Складний рух"},
    "reason_fast_action":  {"en": "Fast Action", "ua": "Швидка дія"},
}


def translate(key: str, language: Language, **kwargs) -> str:
    """Look up a message for ``language`` and fill its placeholders."""
    template = MESSAGES[key][Language(language).value]
    return template.format(**kwargs) if kwargs else template


class NotificationSink:
    """Timestamp-keyed toast queue with a fixed auto-dismiss duration.

    Ids are millisecond timestamps, bumped when two pushes land in the same
    millisecond. Duplicate messages are not suppressed.
    """

    def __init__(
        self,
        ttl_sec: float = NOTIFICATION_TTL_SEC,
        clock: Callable[[], float] = time.time,
    ):
        self._ttl = ttl_sec
        self._clock = clock
        self._items: List[Notification] = []
        self._last_id = 0

    def push(self, message: str, type: NotificationType = NotificationType.INFO) -> Notification:
        now = self._clock()
        nid = max(int(now * 1000), self._last_id + 1)
        self._last_id = nid
        item = Notification(id=nid, type=NotificationType(type), message=message, created_at=now)
        self._items.append(item)
        return item

    def dismiss(self, notification_id: int) -> None:
        self._items = [n for n in self._items if n.id != notification_id]

    def active(self, now: Optional[float] = None) -> List[Notification]:
        """Drop expired notifications and return the rest, oldest first."""
        now = self._clock() if now is None else now
        self._items = [n for n in self._items if now - n.created_at < self._ttl]
        return list(self._items)

    def clear(self) -> None:
        self._items = []
