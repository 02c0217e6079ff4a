from responsescli.utils.text_sanitizer import clean_text


def test_clean_text_replaces_nbsp_and_strips_control_chars():
    assert clean_text("a\u00a0b\x07c\x00") == "a bc"


def test_clean_text_keeps_tabs_and_newlines():
    assert clean_text("line 1\n\tline 2\r\n") == "line 1\n\tline 2\r\n"


def test_clean_text_drops_surrogates_and_noncharacters():
    assert clean_text("ok\ud800\uffff\ufffe!") == "ok!"


def test_clean_text_handles_empty_and_none():
    assert clean_text("") == ""
    assert clean_text(None) == ""


def test_clean_text_leaves_regular_unicode_alone():
    assert clean_text("héllo 世界") == "héllo 世界"
