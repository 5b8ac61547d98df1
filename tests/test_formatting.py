from datetime import datetime

from medichat.formatting import Span, format_response, format_timestamp, split_emphasis, strip_emphasis, to_rich_text


def test_split_emphasis_mixed_line():
    assert split_emphasis("Take **ibuprofen** with **food**.") == [
        Span("Take ", False),
        Span("ibuprofen", True),
        Span(" with ", False),
        Span("food", True),
        Span(".", False),
    ]


def test_unclosed_marker_stays_plain():
    assert split_emphasis("**not bold") == [Span("**not bold", False)]


def test_empty_bold_is_dropped():
    assert split_emphasis("a****b") == [Span("a", False), Span("b", False)]


def test_format_response_preserves_blank_lines():
    lines = format_response("One\n\nTwo")
    assert lines == [[Span("One", False)], [], [Span("Two", False)]]


def test_strip_emphasis():
    assert strip_emphasis("**Rest** well.\nDrink **water**") == "Rest well.\nDrink water"


def test_to_rich_text_plain_and_styles():
    text = to_rich_text("**Rest** now\nlater")
    assert text.plain == "Rest now\nlater"
    assert any(span.style == "bold" for span in text.spans)


def test_format_timestamp():
    assert format_timestamp(datetime(2025, 3, 14, 9, 5, 12)) == "3/14/2025, 9:05:12 AM"
    assert format_timestamp(datetime(2025, 3, 14, 0, 0, 0)) == "3/14/2025, 12:00:00 AM"
    assert format_timestamp(datetime(2025, 3, 14, 15, 30, 1)) == "3/14/2025, 3:30:01 PM"
