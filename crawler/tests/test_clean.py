from crawler.extractors.clean import clean_content

SAMPLES = [
    "  Hello   world \n\n\n\n  Second\tparagraph  ",
    "a\n \n \nb",
    "\r\nWindows\r\nline  endings\r\n\r\n\r\n\r\nend",
    "already clean\n\nparagraphs",
    "",
    "   \n\n  \t ",
    "中文  内容\n\n\n\n第二段",
]


def test_clean_collapses_whitespace_and_blank_lines():
    assert clean_content("  Hello   world \n\n\n\n  Second\tparagraph  ") == "Hello world\n\nSecond paragraph"


def test_clean_keeps_single_blank_line_between_paragraphs():
    assert clean_content("a\n \n \nb") == "a\n\nb"
    assert clean_content("one\n\ntwo") == "one\n\ntwo"
    assert clean_content("one\ntwo") == "one\ntwo"


def test_clean_normalises_line_endings():
    assert clean_content("\r\nWindows\r\nline  endings\r\n\r\n\r\n\r\nend") == "Windows\nline endings\n\nend"


def test_clean_handles_empty_input():
    assert clean_content("") == ""
    assert clean_content("   \n\n  \t ") == ""
    assert clean_content(None) == ""


def test_clean_is_idempotent():
    for sample in SAMPLES:
        once = clean_content(sample)
        assert clean_content(once) == once
