"""Tests for the completion reply parsers."""

import pytest

from thinkcheck.core.constants import DEFAULT_CATEGORY, DEFAULT_COMMENTS, DEFAULT_SUGGESTIONS, MAX_NOTES_SECTIONS
from thinkcheck.core.exceptions import JSONParseError, MalformedBlockError
from thinkcheck.core.parsers import (
    EvaluationOutputParser,
    McqOutputParser,
    NotesOutputParser,
    WrittenQuestionOutputParser,
    extract_first_json_object,
    mask_code_fences,
    normalize_evaluation,
    parse_categories,
    restore_code_fences,
    round_half_up,
)


class TestMcqOutputParser:
    def test_simple_question(self):
        text = "1. What is 2+2?\na) 3\nb) 4\nc) 5\nd) 6\n\nCorrect Answer: b)\n\nExplanation: basic addition"
        questions = McqOutputParser().parse(text)

        assert len(questions) == 1
        item = questions[0]
        assert item.question == "What is 2+2?"
        assert item.choices == ["a) 3", "b) 4", "c) 5", "d) 6"]
        assert item.correctAnswer == "b"
        assert "basic addition" in item.explanation
        assert item.codeSnippets == []

    def test_preamble_and_code_fence(self, mcq_reply):
        questions = McqOutputParser(difficulty="hard").parse(mcq_reply)

        assert [q.correctAnswer for q in questions] == ["b", "b"]
        assert all(q.difficulty == "hard" for q in questions)

        code_question = questions[1]
        assert code_question.question == 'What is printed?\n```javascript\nconsole.log(2 + "2");\n```'
        assert len(code_question.codeSnippets) == 1
        assert code_question.codeSnippets[0].language == "javascript"
        assert code_question.codeSnippets[0].code == 'console.log(2 + "2");'
        assert code_question.explanation.startswith("Explanation:")

    def test_code_lines_do_not_split_blocks_or_pose_as_choices(self):
        text = (
            "1. What does this print?\n"
            "```python\n"
            "a) = 1\n"
            "2. print(a)\n"
            "```\n"
            "a) 1\nb) 2\nc) None\nd) SyntaxError\n"
            "Correct Answer: d)\n"
            "Explanation: a) = 1 is not valid Python."
        )
        questions = McqOutputParser().parse(text)

        assert len(questions) == 1
        assert questions[0].choices == ["a) 1", "b) 2", "c) None", "d) SyntaxError"]
        assert questions[0].codeSnippets[0].code == "a) = 1\n2. print(a)"

    def test_missing_correct_answer_is_dropped(self):
        text = (
            "1. First?\na) w\nb) x\nc) y\nd) z\nExplanation: none given\n"
            "2. Second?\na) w\nb) x\nc) y\nd) z\nCorrect Answer: a)\nExplanation: w"
        )
        questions = McqOutputParser().parse(text)

        assert len(questions) == 1
        assert questions[0].question == "Second?"
        assert questions[0].correctAnswer == "a"

    def test_malformed_block_does_not_affect_others(self):
        text = (
            "Question 1: Incomplete?\na) one\nb) two\nCorrect Answer: a)\n"
            "Question 2: Complete?\na) one\nb) two\nc) three\nd) four\nCorrect Answer: D)\nBecause four."
        )
        questions = McqOutputParser().parse(text)

        assert len(questions) == 1
        assert questions[0].question == "Complete?"
        assert questions[0].correctAnswer == "d"
        assert questions[0].explanation == "Because four."

    def test_question_wording_does_not_open_explanation(self):
        text = "1. Explain the reason for hoisting.\na) w\nb) x\nc) y\nd) z\nCorrect Answer: c)"
        questions = McqOutputParser().parse(text)

        assert questions[0].question == "Explain the reason for hoisting."
        assert questions[0].explanation == ""

    def test_duplicate_choice_labels_rejected(self):
        block = " Which?\na) w\na) x\nc) y\nd) z\nCorrect Answer: a)"
        with pytest.raises(MalformedBlockError):
            McqOutputParser().parse_block(block)

    def test_empty_text(self):
        assert McqOutputParser().parse("") == []
        assert McqOutputParser().parse("   \n") == []


class TestWrittenQuestionOutputParser:
    def test_categories_assigned_round_robin(self):
        text = "1. Explain closures.\n2. Describe the event loop.\n3) Compare let and var."
        parser = WrittenQuestionOutputParser(categories=["Scope", "Async"], difficulty="easy")
        questions = parser.parse(text)

        assert [q.question for q in questions] == [
            "Explain closures.",
            "Describe the event loop.",
            "Compare let and var.",
        ]
        assert [q.category for q in questions] == ["Scope", "Async", "Scope"]
        assert all(q.difficulty == "easy" for q in questions)

    def test_preamble_is_its_own_block(self):
        text = "Here are your questions:\n1. Explain closures.\n2. Explain hoisting."
        questions = WrittenQuestionOutputParser(categories=["A", "B"]).parse(text)

        assert [(q.question, q.category) for q in questions] == [
            ("Here are your questions:", "A"),
            ("Explain closures.", "B"),
            ("Explain hoisting.", "A"),
        ]

    def test_blank_category_slot_uses_default(self):
        text = "1. One?\n2. Two?\n3. Three?"
        questions = WrittenQuestionOutputParser(categories=parse_categories("A,,B")).parse(text)

        assert [q.category for q in questions] == ["A", DEFAULT_CATEGORY, "B"]

    def test_code_fences_removed(self):
        text = "1. What is wrong here?\n```js\nvar x = ;\n```\n2. Explain scope."
        questions = WrittenQuestionOutputParser().parse(text)

        assert questions[0].question == "What is wrong here?"
        assert len(questions) == 2

    def test_unnumbered_text_is_one_question(self):
        questions = WrittenQuestionOutputParser().parse("Explain closures in your own words.")
        assert len(questions) == 1


class TestNotesOutputParser:
    def test_no_headings_gives_single_section(self):
        notes = NotesOutputParser(subject="Closures").parse("Closures capture variables.")

        assert len(notes.sections) == 1
        assert notes.sections[0].title == "Closures"
        assert notes.sections[0].content == "Closures capture variables."
        assert notes.title == "Closures"

    def test_sections_split_on_headings(self):
        text = "# Intro\nSome intro.\n\n## Details ##\nMore text.\n### Summary\nDone."
        notes = NotesOutputParser(subject="Closures", level="beginner").parse(text)

        assert [s.title for s in notes.sections] == ["Intro", "Details", "Summary"]
        assert notes.sections[0].content == "Some intro."
        assert notes.sections[2].content == "Done."
        assert notes.level == "beginner"
        assert notes.fullText == text

    def test_sections_capped(self):
        text = "\n".join(f"## Part {i}\nBody {i}" for i in range(1, 16))
        notes = NotesOutputParser(subject="Big").parse(text)

        assert len(notes.sections) == MAX_NOTES_SECTIONS
        assert notes.sections[-1].title == "Part 10"
        assert "Part 15" in notes.fullText

    def test_comment_in_code_is_not_a_heading(self):
        text = "# Shell\nRun this:\n```bash\n# install deps\npip install x\n```\n"
        notes = NotesOutputParser(subject="Setup").parse(text)

        assert [s.title for s in notes.sections] == ["Shell"]
        assert "# install deps" in notes.sections[0].content


class TestCodeFences:
    def test_mask_and_restore(self):
        text = "Before\n```python\nprint(1)\n```\nAfter"
        masked, snippets = mask_code_fences(text)

        assert "print(1)" not in masked
        assert snippets[0].language == "python"
        assert restore_code_fences(masked, snippets) == text

    def test_unknown_placeholder_left_alone(self):
        assert restore_code_fences("@@CODE_BLOCK_3@@", []) == "@@CODE_BLOCK_3@@"


class TestJsonExtraction:
    def test_object_inside_prose(self):
        text = 'Sure! {"score": 80, "comments": "use {} for sets", "suggestions": []} Hope that helps.'
        data = extract_first_json_object(text)

        assert data == {"score": 80, "comments": "use {} for sets", "suggestions": []}

    def test_nested_object(self):
        data = extract_first_json_object('{"score": 70, "meta": {"model": "x"}}')
        assert data["meta"] == {"model": "x"}

    def test_repairs_trailing_commas_and_bare_keys(self):
        assert extract_first_json_object('{"score": 70, "comments": "ok",}') == {"score": 70, "comments": "ok"}
        assert extract_first_json_object("{score: 65}") == {"score": 65}

    def test_skips_unparsable_candidates(self):
        data = extract_first_json_object('{not json} then {"score": 1}')
        assert data == {"score": 1}

    def test_no_object(self):
        assert extract_first_json_object("I think the answer is fine.") is None
        assert extract_first_json_object("") is None


class TestNormalizeEvaluation:
    @pytest.mark.parametrize("raw, expected", [
        (150, 100),
        (-5, 0),
        (72.5, 73),
        ("85%", 85),
        (0, 0),
        (None, 50),
        ("great", 50),
        (True, 50),
        (float("nan"), 50),
    ])
    def test_score_coercion(self, raw, expected):
        assert normalize_evaluation({"score": raw}).score == expected

    def test_defaults(self):
        item = normalize_evaluation({})
        assert item.comments == DEFAULT_COMMENTS
        assert item.suggestions == DEFAULT_SUGGESTIONS

    def test_feedback_key_and_suggestion_cap(self):
        item = normalize_evaluation({
            "score": 90,
            "feedback": " Good answer. ",
            "suggestions": ["one", "two", "", "three", "four"],
        })
        assert item.comments == "Good answer."
        assert item.suggestions == ["one", "two", "three"]

    def test_parser_raises_without_json(self):
        with pytest.raises(JSONParseError):
            EvaluationOutputParser().parse("Score: eighty")


def test_round_half_up():
    assert round_half_up(70.5) == 71
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_parse_categories():
    assert parse_categories("Scope, Async") == ["Scope", "Async"]
    assert parse_categories("Scope,,Async") == ["Scope", DEFAULT_CATEGORY, "Async"]
    assert parse_categories(["Memory"]) == ["Memory"]
    assert parse_categories(None) == [DEFAULT_CATEGORY]
    assert parse_categories("") == [DEFAULT_CATEGORY]
