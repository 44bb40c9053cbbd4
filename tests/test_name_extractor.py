from roster_attendance.services import extract_names


def test_extracts_names_and_drops_stopwords():
    assert extract_names("김민수 이영희 출석 확인") == ["김민수", "이영희"]


def test_deduplicates_in_first_occurrence_order():
    text = "1. 이영희\n2. 김민수\n3. 이영희 (지각)"
    assert extract_names(text) == ["이영희", "김민수"]


def test_ignores_non_hangul_and_single_syllables():
    assert extract_names("John, 김 / 박지성 :) 12시") == ["박지성"]


def test_blank_text_yields_nothing():
    assert extract_names("") == []
    assert extract_names("   \n\t") == []


def test_custom_stoplist():
    assert extract_names("김민수 이영희", stopwords={"김민수"}) == ["이영희"]
