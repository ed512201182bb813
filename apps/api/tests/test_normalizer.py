import pytest

from examprep.services.normalizer import (
    GeneratedFlashcard,
    GeneratedQuestion,
    NormalizeOptions,
    build_fallback_summary,
    ensure_point_wise_summary,
    normalize_generated_content,
)
from conftest import make_payload

OPTS = NormalizeOptions(min_questions=1, max_questions=10, expected_most_likely=1, expected_flashcards=20)


def _flags(content):
    return [q.is_most_likely for q in content.questions]


def test_extra_most_likely_flags_are_demoted_from_the_tail():
    raw = make_payload(n_questions=8, flagged=(2, 5))
    out = normalize_generated_content(raw, OPTS)
    assert len(out.questions) == 8
    assert _flags(out) == [False, False, True, False, False, False, False, False]
    assert len(out.flashcards) == 20
    assert out.summary == "- First point.\n- Second point."


def test_missing_flags_are_promoted_in_list_order():
    opts = NormalizeOptions(min_questions=3, max_questions=10, expected_most_likely=3, expected_flashcards=20)
    raw = make_payload(n_questions=5, flagged=(3,))
    out = normalize_generated_content(raw, opts)
    assert _flags(out) == [True, True, False, True, False]


def test_expected_most_likely_is_clamped_to_available_questions():
    opts = NormalizeOptions(min_questions=1, max_questions=10, expected_most_likely=5, expected_flashcards=20)
    out = normalize_generated_content(make_payload(n_questions=2, flagged=()), opts)
    assert _flags(out) == [True, True]


def test_zero_expected_clears_every_flag():
    opts = NormalizeOptions(min_questions=0, max_questions=10, expected_most_likely=0, expected_flashcards=20)
    out = normalize_generated_content(make_payload(n_questions=4, flagged=(0, 1, 2, 3)), opts)
    assert not any(_flags(out))


@pytest.mark.parametrize("expected", [0, 1, 2, 4, 6])
def test_most_likely_count_is_exact(expected):
    opts = NormalizeOptions(min_questions=0, max_questions=10, expected_most_likely=expected, expected_flashcards=20)
    for flagged in [(), (0,), (1, 3), (0, 1, 2, 3, 4, 5)]:
        out = normalize_generated_content(make_payload(n_questions=6, flagged=flagged), opts)
        assert sum(_flags(out)) == expected


def test_invalid_questions_are_dropped_and_list_is_capped():
    raw = {
        "questions": [
            {"question": "  ", "answer": "x", "is_most_likely": True},
            {"question": "Kept?", "answer": "   "},
            "not a dict",
            {"question": " Real? ", "answer": " Yes ", "is_most_likely": "false"},
        ]
        + [{"question": f"Q{i}", "answer": "A"} for i in range(15)],
        "flashcards": [],
        "summary": "",
    }
    out = normalize_generated_content(raw, OPTS)
    assert len(out.questions) == 10
    assert out.questions[0].question == "Real?"
    assert out.questions[0].answer == "Yes"
    # string "false" is not a flag; the first entry is promoted to satisfy the count
    assert out.questions[0].is_most_likely is True
    assert sum(_flags(out)) == 1


def test_flashcards_are_filtered_and_truncated_but_never_padded():
    raw = make_payload(n_flashcards=25)
    raw["flashcards"].insert(0, {"front": "", "back": "orphan"})
    out = normalize_generated_content(raw, OPTS)
    assert len(out.flashcards) == 20
    assert out.flashcards[0].front == "Term 0"

    short = normalize_generated_content(make_payload(n_flashcards=5), OPTS)
    assert len(short.flashcards) == 5


def test_non_dict_payload_gives_empty_content():
    out = normalize_generated_content(["nope"], OPTS)
    assert out.questions == []
    assert out.flashcards == []
    assert out.summary == ""


def test_bulleted_summary_keeps_lines_and_unifies_markers():
    summary = "• Paging splits memory\n- TLB caches translations\n  • nested point"
    assert ensure_point_wise_summary(summary) == "- Paging splits memory\n- TLB caches translations\n  - nested point"


def test_prose_summary_is_split_into_at_most_twelve_bullets():
    prose = " ".join(f"Sentence {i} ends here." for i in range(20))
    out = ensure_point_wise_summary(prose)
    lines = out.splitlines()
    assert len(lines) == 12
    assert all(line.startswith("- ") for line in lines)
    assert lines[0] == "- Sentence 0 ends here."


def test_single_sentence_summary_becomes_one_bullet():
    assert ensure_point_wise_summary("Round robin uses a quantum") == "- Round robin uses a quantum"


def test_fallback_summary_uses_flashcards_first():
    cards = [GeneratedFlashcard(f"F{i}", f"B{i}") for i in range(12)]
    out = build_fallback_summary([], cards)
    lines = out.splitlines()
    assert len(lines) == 10
    assert lines[0] == "- F0: B0"


def test_fallback_summary_adds_questions_when_few_flashcards():
    cards = [GeneratedFlashcard("Deadlock", "Circular wait")]
    questions = [GeneratedQuestion(f"Q{i}", "x" * 200) for i in range(10)]
    lines = build_fallback_summary(questions, cards).splitlines()
    assert len(lines) == 1 + 8
    assert lines[1].startswith("- Q0: ")
    assert lines[1].endswith("…")
    assert len(lines[1]) == len("- Q0: ") + 140 + 1


def test_empty_summary_is_replaced_by_fallback():
    raw = make_payload(n_flashcards=3, summary="   ")
    out = normalize_generated_content(raw, OPTS)
    assert out.summary.splitlines()[0] == "- Term 0: Meaning 0"


@pytest.mark.parametrize(
    "raw",
    [
        make_payload(),
        make_payload(n_questions=14, flagged=(1, 2, 3), n_flashcards=30, summary="• a\n• b"),
        make_payload(n_questions=3, flagged=(), n_flashcards=2, summary=""),
        {"questions": "garbage", "flashcards": None, "summary": 42},
    ],
)
def test_normalization_is_idempotent(raw):
    once = normalize_generated_content(raw, OPTS)
    twice = normalize_generated_content(once.to_dict(), OPTS)
    assert twice == once
