"""Tests for text cleaning and heuristic analysis."""

from findorigin.analysis import (
    analyze_text,
    clean_text,
    extract_dates,
    extract_key_claims,
    extract_links,
    extract_names,
    extract_numbers,
    generate_search_queries,
)


def test_percentage_and_bare_year():
    """A percentage is found; a bare year is a number but never a date."""
    text = "Цены выросли на 15% в 2024 году"

    numbers = extract_numbers(text)
    assert "15%" in numbers
    assert "2024" in numbers
    assert extract_dates(text) == []


def test_percentage_also_matches_plain_number():
    assert extract_numbers("рост на 15%") == ["15%", "15"]


def test_single_digits_are_dropped():
    assert extract_numbers("у нас 3 кота и 12 собак") == ["12"]


def test_dates_in_all_formats():
    text = "Сначала 12.03.2024, потом 2024-03-15, затем 5 мая 2023 и в итоге март 2022."
    assert extract_dates(text) == ["12.03.2024", "2024-03-15", "5 мая 2023", "март 2022"]


def test_dates_are_unique():
    assert extract_dates("01.02.2020 и снова 01.02.2020") == ["01.02.2020"]


def test_key_claims_skip_questions_and_short_sentences():
    text = (
        "Правительство объявило о новой программе поддержки. "
        "Что дальше?Никто пока не знает ответа. "
        "Коротко. "
        "Программа начнёт работать уже в следующем месяце."
    )
    assert extract_key_claims(text) == [
        "Правительство объявило о новой программе поддержки",
        "Программа начнёт работать уже в следующем месяце.",
    ]


def test_key_claims_skip_shouting():
    text = "ВНИМАНИЕ ВСЕМ ЖИТЕЛЯМ ГОРОДА! Завтра в городе отключат горячую воду."
    assert extract_key_claims(text) == ["Завтра в городе отключат горячую воду."]


def test_key_claims_are_capped_at_three():
    sentence = "Это достаточно длинное утверждение номер {}"
    text = ". ".join(sentence.format(i) for i in range(5))
    assert len(extract_key_claims(text)) == 3


def test_names_skip_first_word_and_stop_words():
    text = "Вчера Путин и Байден встретились. Однако Байден уехал, Это всё."
    assert extract_names(text) == ["Путин", "Байден"]


def test_names_strip_punctuation():
    assert extract_names("встреча с (Илоном) Маском, и «Tesla»") == ["Илоном", "Маском"]


def test_links():
    text = "см. https://example.com/a и http://test.org/b?x=1 и снова https://example.com/a"
    assert extract_links(text) == ["https://example.com/a", "http://test.org/b?x=1"]


def test_search_queries_order_and_dedup():
    queries = generate_search_queries(
        "Минфин сообщил, что инфляция замедлилась до 7% в марте 2024 года",
        key_claims=["Минфин сообщил, что инфляция замедлилась до 7% в марте 2024 года", "Второе утверждение"],
        names=["Минфин"],
        dates=["март 2024"],
        numbers=["7%"],
    )
    assert queries == [
        "Минфин сообщил, что инфляция замедлилась до 7% в марте 2024 года",
        "Второе утверждение",
        "Минфин март 2024",
        "Минфин 7%",
    ]


def test_search_queries_capped_at_five():
    queries = generate_search_queries(
        "x" * 150,
        key_claims=["claim one is long enough", "claim two is long enough", "claim three"],
        names=["Name"],
        dates=["12.03.2024"],
        numbers=["42"],
    )
    assert len(queries) == 5
    assert queries[0] == "x" * 100


def test_short_text_has_no_main_query():
    assert generate_search_queries("коротко", [], [], [], []) == []


def test_analyze_text_scenario():
    data = analyze_text("Цены выросли на 15% в 2024 году")

    assert data.key_claims == ["Цены выросли на 15% в 2024 году"]
    assert data.numbers == ["15%", "15", "2024"]
    assert data.dates == []
    assert data.names == []
    assert data.search_queries == ["Цены выросли на 15% в 2024 году"]


def test_analyze_text_never_raises_on_odd_input():
    for value in ("", "   ", None, 12345, "?!?!"):
        data = analyze_text(value)
        assert len(data.search_queries) <= 5


def test_analyze_text_is_deterministic():
    text = "Илон Маск заявил 12.03.2024, что Tesla выросла на 20%. Акции подорожали вдвое."
    assert analyze_text(text) == analyze_text(text)


def test_clean_text_strips_markup():
    raw = "**Важно**: <b>цены</b> выросли, см. [отчёт](https://example.com)\n\n  _сегодня_"
    assert clean_text(raw) == "Важно: цены выросли, см. отчёт сегодня"


def test_clean_text_empty():
    assert clean_text(None) == ""
    assert clean_text("   \n\t ") == ""
