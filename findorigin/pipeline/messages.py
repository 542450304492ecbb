"""User-facing chat texts."""

from typing import Sequence

from findorigin.models import ComparisonResult, Confidence
from findorigin.source_types import SourceType

WELCOME = (
    "Привет! Я помогаю найти первоисточник информации.\n\n"
    "Отправьте мне текст новости, утверждения или поста, и я поищу, откуда он мог появиться."
)
HELP = (
    "Как пользоваться ботом:\n"
    "1. Скопируйте текст, источник которого хотите найти.\n"
    "2. Отправьте его сюда одним сообщением.\n"
    "3. Дождитесь списка возможных источников с оценкой релевантности.\n\n"
    "Чем больше в тексте имён, дат и цифр, тем точнее поиск."
)
EMPTY_MESSAGE = "Отправьте текст, источник которого нужно найти."
FORWARD_REQUEST = (
    "Для работы с сообщениями из каналов, пожалуйста, перешлите сообщение боту или скопируйте его текст."
)
ACKNOWLEDGEMENT = "🔍 Получил сообщение. Анализирую текст и ищу источники, это может занять до минуты..."
SEARCH_NOT_CONFIGURED = "Поиск источников временно недоступен: не настроен ни один поисковый сервис."
NO_SOURCES_FOUND = (
    "Источники не найдены. Попробуйте отправить более полный текст с именами, датами или цифрами."
)
NO_RELEVANT_SOURCES = (
    "Найденные страницы слабо связаны с текстом, поэтому определить источник не удалось."
)
REASONING_UNAVAILABLE_NOTE = "⚠️ AI сравнение недоступно, источники показаны без ранжирования."
INTERNAL_ERROR = "Не удалось завершить поиск источников из-за внутренней ошибки. Попробуйте ещё раз позже."

SOURCE_TYPE_LABELS = {
    SourceType.OFFICIAL: "официальный",
    SourceType.NEWS: "новости",
    SourceType.RESEARCH: "исследование",
    SourceType.BLOG: "блог",
    SourceType.OTHER: "другое",
}
CONFIDENCE_LABELS = {
    Confidence.HIGH: "высокая уверенность",
    Confidence.MEDIUM: "средняя уверенность",
    Confidence.LOW: "низкая уверенность",
}


def searching(query_count: int) -> str:
    return f"Ищу источники по запросам: {query_count}..."


def comparing(candidate_count: int) -> str:
    return f"Найдено страниц: {candidate_count}. Сравниваю их с исходным текстом..."


def format_results(results: Sequence[ComparisonResult], used_fallback: bool = False) -> str:
    lines = ["Возможные источники:", ""]
    for index, result in enumerate(results, 1):
        source = result.source
        lines.append(f"{index}. {source.title}")
        lines.append(source.url)
        lines.append(
            f"Тип: {SOURCE_TYPE_LABELS[source.source_type]} · "
            f"релевантность {result.relevance_score}% ({CONFIDENCE_LABELS[result.confidence]})"
        )
        if result.explanation:
            lines.append(result.explanation)
        lines.append("")
    if used_fallback:
        lines.append(REASONING_UNAVAILABLE_NOTE)
    return "\n".join(lines).strip()
